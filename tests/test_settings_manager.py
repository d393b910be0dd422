from __future__ import annotations

import json
from pathlib import Path

from mailshell.settings_manager import SettingsManager


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    sm = SettingsManager(str(tmp_path / "settings.json"))
    assert sm.get("resource") == "account"
    assert sm.get("dialect") == "bare"
    assert sm.backend_command == []
    assert sm.notifier_timeout_ms == 4000
    assert sm.window_size() == (720, 720)


def test_set_persists_to_disk(tmp_path: Path) -> None:
    settings_path = tmp_path / "cfg" / "settings.json"
    sm = SettingsManager(str(settings_path))
    sm.set("backend_command", ["./astimail-backend", "-v"])

    with open(settings_path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["backend_command"] == ["./astimail-backend", "-v"]
    assert SettingsManager(str(settings_path)).backend_command == ["./astimail-backend", "-v"]


def test_backend_command_accepts_string(tmp_path: Path) -> None:
    sm = SettingsManager(str(tmp_path / "settings.json"))
    sm.set("backend_command", "python backend.py")
    assert sm.backend_command == ["python", "backend.py"]


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{not json", encoding="utf-8")
    sm = SettingsManager(str(settings_path))
    assert sm.data == {}
    assert sm.get("theme") == "dark"


def test_invalid_numbers_use_defaults(tmp_path: Path) -> None:
    sm = SettingsManager(str(tmp_path / "settings.json"))
    sm.set("notifier_timeout_ms", "soon")
    sm.set("window_width", None)
    sm.set("window_height", "tall")
    assert sm.notifier_timeout_ms == 4000
    assert sm.window_size() == (720, 720)
