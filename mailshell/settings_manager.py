from __future__ import annotations

import json
import os
from typing import Any

from .logger import get_logger

_logger = get_logger("settings")


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "resource": "account",
        "dialect": "bare",
        "backend_command": [],
        "theme": "dark",
        "notifier_timeout_ms": 4000,
        "window_width": 720,
        "window_height": 720,
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except Exception as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            os.makedirs(os.path.dirname(self.settings_path) or ".", exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except Exception as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def backend_command(self) -> list[str]:
        val = self.get("backend_command")
        if isinstance(val, str):
            return val.split() if val.strip() else []
        if isinstance(val, (list, tuple)):
            return [str(v) for v in val if v is not None and str(v)]
        return []

    @property
    def notifier_timeout_ms(self) -> int:
        try:
            return max(0, int(self.get("notifier_timeout_ms")))
        except (TypeError, ValueError):
            _logger.warning("invalid notifier_timeout_ms: %r", self.get("notifier_timeout_ms"))
            return int(self.DEFAULTS["notifier_timeout_ms"])

    def window_size(self) -> tuple[int, int]:
        try:
            return int(self.get("window_width")), int(self.get("window_height"))
        except (TypeError, ValueError):
            _logger.warning("invalid window size in settings, using defaults")
            return int(self.DEFAULTS["window_width"]), int(self.DEFAULTS["window_height"])
