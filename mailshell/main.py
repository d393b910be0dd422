import argparse
import os
import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths, QTimer, QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QApplication, QMainWindow, QVBoxLayout, QWidget

from mailshell.exceptions import TransportError
from mailshell.logger import get_logger
from mailshell.protocol import ResourceProfile, build_profile
from mailshell.session import ClientSession
from mailshell.settings_manager import SettingsManager
from mailshell.styles import apply_theme
from mailshell.transport import ProcessTransport, Transport
from mailshell.ui_view import ViewHost
from mailshell.ui_widgets import LoaderOverlay, ModalDialog, ToastNotifier
from mailshell.widgets import WidgetSet

_BASE_DIR = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parent))


# --- CLI logging options -----------------------------------------------------
# Qt rejects unknown options, so ours are parsed first, reflected in the
# environment (MAILSHELL_LOG_LEVEL, MAILSHELL_LOG_CATS) and removed from argv.


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    parser = argparse.ArgumentParser(description="Mailshell", add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv[1:])
    if args.log_level:
        os.environ["MAILSHELL_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["MAILSHELL_LOG_CATS"] = args.log_cats
    return [argv[0], *remaining]


logger = get_logger("main")


def default_settings_path() -> str:
    app_cfg = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppConfigLocation)
    if app_cfg:
        return (Path(app_cfg) / "mailshell" / "settings.json").as_posix()
    return (_BASE_DIR / "settings.json").as_posix()


def profile_from_settings(
    settings: SettingsManager, resource: str | None = None, dialect: str | None = None
) -> ResourceProfile:
    return build_profile(
        resource or settings.get("resource"),
        dialect=dialect or settings.get("dialect"),
        supports_open=settings.get("supports_open") if settings.has("supports_open") else None,
        supports_logout=settings.get("supports_logout") if settings.has("supports_logout") else None,
    )


def _open_url(url: str) -> None:
    if not QDesktopServices.openUrl(QUrl(url)):
        logger.warning("could not open url: %s", url)


class MainWindow(QMainWindow):
    def __init__(
        self,
        settings: SettingsManager,
        profile: ResourceProfile,
        transport: Transport,
        url_opener=_open_url,
    ) -> None:
        super().__init__()
        self.setWindowTitle("Mailshell")
        self.resize(*settings.window_size())

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        self.view_host = ViewHost(self._on_action, central)
        layout.addWidget(self.view_host)
        self.setCentralWidget(central)

        self.loader = LoaderOverlay(central)
        self.notifier = ToastNotifier(central, timeout_ms=settings.notifier_timeout_ms)
        self.modal = ModalDialog(self, self._on_action, on_dismiss=self._on_modal_dismissed)

        self.session = ClientSession(
            transport,
            WidgetSet(loader=self.loader, notifier=self.notifier, modaler=self.modal),
            profile,
            renderer=self.view_host.render,
            url_opener=url_opener,
        )

    def _on_action(self, action, payload, values) -> None:
        self.session.handle_action(action, payload, values)

    def _on_modal_dismissed(self) -> None:
        self.session.dismiss_modal()


def _split_backend_command(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split at the first ``--``; everything after it is the backend command line."""
    if "--" not in argv:
        return argv, []
    idx = argv.index("--")
    return argv[:idx], argv[idx + 1 :]


def _parse_command_line(argv: list[str]) -> tuple[argparse.Namespace, list[str], list[str]]:
    """Return ``(options, qt_argv, backend_command)``.

    The backend command must follow ``--`` so Qt options such as
    ``-style fusion`` are never mistaken for it.
    """
    front, backend = _split_backend_command(list(argv))
    front = _apply_cli_logging_options(front)

    parser = argparse.ArgumentParser(
        prog="mailshell", usage="%(prog)s [options] [qt options] -- backend [args...]", add_help=True
    )
    parser.add_argument("--settings", help="Path to settings.json")
    parser.add_argument("--resource", help="Resource profile (account, email)")
    parser.add_argument("--dialect", choices=("bare", "namespaced"), help="Outbound command spelling")
    args, qt_args = parser.parse_known_args(front[1:])
    return args, [front[0], *qt_args], backend


def _wire_backend_lifecycle(app, transport: ProcessTransport) -> None:
    """Quit when the backend exits; exit with status 1 when it never starts."""

    def _failed(exc: TransportError) -> None:
        logger.error("%s", exc)
        app.exit(1)

    transport.on_finished(lambda _code: app.quit())
    transport.on_failed(_failed)
    app.aboutToQuit.connect(transport.stop)


def run(argv: list[str] | None = None) -> int:
    """Application entrypoint (packaging-friendly)."""
    if argv is None:
        argv = sys.argv
    args, qt_argv, backend = _parse_command_line(argv)

    app = QApplication(qt_argv)

    settings_path = args.settings or default_settings_path()
    settings = SettingsManager(settings_path)
    profile = profile_from_settings(settings, args.resource, args.dialect)

    command = backend or settings.backend_command
    if not command:
        logger.error("no backend command: pass one after -- or set backend_command in %s", settings_path)
        return 2

    transport = ProcessTransport(command, parent=app)
    window = MainWindow(settings, profile, transport)
    apply_theme(app, str(settings.get("theme", "dark")))
    _wire_backend_lifecycle(app, transport)

    window.show()
    window.session.start()
    # Started from inside the loop so a start failure can still end it.
    QTimer.singleShot(0, transport.start)
    logger.info("mailshell started: resource=%s dialect=%s", profile.name, profile.dialect.value)
    return app.exec()


if __name__ == "__main__":
    sys.exit(run())
