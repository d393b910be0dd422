from __future__ import annotations

import os
import sys
import time
from pathlib import Path

from PySide6.QtWidgets import QApplication, QLineEdit, QPushButton

from mailshell.main import (
    MainWindow,
    _apply_cli_logging_options,
    _parse_command_line,
    _wire_backend_lifecycle,
    profile_from_settings,
)
from mailshell.protocol import Dialect
from mailshell.settings_manager import SettingsManager
from mailshell.transport import LoopbackTransport, ProcessTransport
from mailshell.view import MODAL_HIDDEN


def _window(tmp_path: Path, **settings):
    sm = SettingsManager(str(tmp_path / "settings.json"))
    for key, value in settings.items():
        sm.set(key, value)
    transport = LoopbackTransport()
    opened: list[str] = []
    win = MainWindow(sm, profile_from_settings(sm), transport, url_opener=opened.append)
    win.session.start()
    transport.mark_ready()
    return win, transport, opened


def test_full_account_flow(tmp_path: Path) -> None:
    win, transport, _ = _window(tmp_path)
    assert transport.sent == [("index", None)]
    assert not win.loader.isHidden()

    transport.deliver("indexed", "login")
    assert win.loader.isHidden()
    assert win.view_host.current.key == "auth.login"
    win.view_host.content.findChild(QLineEdit, "password").setText("pw")
    win.view_host.content.findChild(QPushButton, "btn-login").click()
    assert transport.sent[-1] == ("login", "pw")

    transport.deliver("logged.in")
    assert transport.sent[-1] == ("index", None)
    transport.deliver("indexed", "index")
    assert transport.sent[-1] == ("account.list", None)
    transport.deliver("account.listed", [{"addr": "a@x.com", "auth_url": "http://srv"}])
    assert win.view_host.current.key == "list"

    win.view_host.content.findChild(QPushButton, "btn-add").click()
    assert not win.modal.isHidden()
    win.modal.content.findChild(QLineEdit, "resource").setText("foo")
    win.modal.content.findChild(QPushButton, "btn-submit-add").click()
    assert transport.sent[-1] == ("account.add", "foo")

    transport.deliver("account.added", "ok")
    assert win.modal.isHidden()
    assert win.session.modal_state == MODAL_HIDDEN
    assert win.notifier.text() == "ok"
    assert transport.sent[-1] == ("account.list", None)


def test_closing_modal_by_hand_resets_modal_state(tmp_path: Path) -> None:
    win, transport, _ = _window(tmp_path)
    transport.deliver("account.listed", [])
    win.view_host.content.findChild(QPushButton, "btn-add").click()
    assert win.session.modal_state.visible

    win.modal.reject()
    assert win.session.modal_state == MODAL_HIDDEN


def test_profile_from_settings_overrides(tmp_path: Path) -> None:
    sm = SettingsManager(str(tmp_path / "settings.json"))
    sm.set("resource", "email")
    sm.set("dialect", "namespaced")
    sm.set("supports_logout", True)

    profile = profile_from_settings(sm)
    assert profile.name == "email"
    assert profile.dialect is Dialect.NAMESPACED
    assert profile.supports_logout is True
    assert profile_from_settings(sm, resource="account").name == "account"


def test_cli_logging_options_are_stripped(monkeypatch) -> None:
    # Registered so the value written below is undone after the test.
    monkeypatch.setenv("MAILSHELL_LOG_LEVEL", "info")
    argv = _apply_cli_logging_options(["mailshell", "--log-level", "debug", "--resource", "email", "./backend"])
    assert argv == ["mailshell", "--resource", "email", "./backend"]
    assert os.environ["MAILSHELL_LOG_LEVEL"] == "debug"


def test_qt_options_before_separator_are_not_the_backend(monkeypatch) -> None:
    monkeypatch.setenv("MAILSHELL_LOG_LEVEL", "info")
    args, qt_argv, backend = _parse_command_line(
        ["mailshell", "--log-level", "debug", "--resource", "email", "-style", "fusion", "--", "./backend", "-v"]
    )
    assert args.resource == "email"
    assert qt_argv == ["mailshell", "-style", "fusion"]
    assert backend == ["./backend", "-v"]
    assert os.environ["MAILSHELL_LOG_LEVEL"] == "debug"


def test_backend_command_is_empty_without_separator() -> None:
    args, qt_argv, backend = _parse_command_line(["mailshell", "--dialect", "namespaced", "-style", "fusion"])
    assert args.dialect == "namespaced"
    assert qt_argv == ["mailshell", "-style", "fusion"]
    assert backend == []


class _Signal:
    def __init__(self) -> None:
        self.slots: list = []

    def connect(self, slot) -> None:
        self.slots.append(slot)


class _App:
    def __init__(self) -> None:
        self.aboutToQuit = _Signal()
        self.exit_codes: list[int] = []
        self.quits = 0

    def exit(self, code: int = 0) -> None:
        self.exit_codes.append(code)

    def quit(self) -> None:
        self.quits += 1


def test_backend_that_cannot_start_exits_with_error_status() -> None:
    app = _App()
    transport = ProcessTransport(["/nonexistent/mailshell-backend"])
    _wire_backend_lifecycle(app, transport)
    assert app.aboutToQuit.slots == [transport.stop]

    transport.start()
    deadline = time.monotonic() + 10
    while not app.exit_codes and time.monotonic() < deadline:
        transport.process.waitForStarted(100)
        QApplication.processEvents()

    assert app.exit_codes == [1]
    assert app.quits == 0


def test_backend_exit_quits_the_app() -> None:
    app = _App()
    transport = ProcessTransport([sys.executable, "-c", "pass"])
    _wire_backend_lifecycle(app, transport)

    transport.start()
    assert transport.process.waitForFinished(10000)
    QApplication.processEvents()

    assert app.quits == 1
    assert app.exit_codes == []
