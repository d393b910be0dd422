from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QEvent, QObject, Qt, QTimer
from PySide6.QtWidgets import QDialog, QLabel, QProgressBar, QVBoxLayout, QWidget

from .logger import get_logger
from .ui_view import ActionCallback, BuiltView, WidgetBuilder
from .view import ViewNode

_logger = get_logger("ui_widgets")


class _ParentTracker(QObject):
    """Keeps an overlay sized to its parent."""

    def __init__(self, overlay: QWidget) -> None:
        super().__init__(overlay)
        self._overlay = overlay

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if event.type() == QEvent.Type.Resize:
            self._overlay.setGeometry(self._overlay.parentWidget().rect())
        return False


class LoaderOverlay(QWidget):
    """Translucent busy indicator covering the parent widget."""

    def __init__(self, parent: QWidget) -> None:
        super().__init__(parent)
        self.setObjectName("loader")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        lay = QVBoxLayout(self)
        lay.addStretch(1)
        self._bar = QProgressBar(self)
        self._bar.setRange(0, 0)
        self._bar.setTextVisible(False)
        self._bar.setFixedWidth(160)
        lay.addWidget(self._bar, 0, Qt.AlignmentFlag.AlignHCenter)
        lay.addStretch(1)
        parent.installEventFilter(_ParentTracker(self))

    def init(self) -> None:
        self.setGeometry(self.parentWidget().rect())
        self.hide()

    def show(self) -> None:
        self.setGeometry(self.parentWidget().rect())
        super().show()
        self.raise_()

    def hide(self) -> None:
        super().hide()


class ToastNotifier(QLabel):
    """Transient message strip at the bottom of the parent widget."""

    def __init__(self, parent: QWidget, timeout_ms: int = 4000) -> None:
        super().__init__(parent)
        self.setObjectName("notifier")
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setWordWrap(True)
        self._timeout_ms = timeout_ms
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.hide)

    def init(self) -> None:
        self.hide()

    def success(self, text: str) -> None:
        self._notify("success", text)

    def error(self, text: str) -> None:
        self._notify("error", text)

    def _notify(self, level: str, text: str) -> None:
        self.setText(text)
        self.setProperty("level", level)
        # Re-polish so the level-dependent stylesheet applies.
        self.style().unpolish(self)
        self.style().polish(self)
        self._place()
        super().show()
        self.raise_()
        if self._timeout_ms > 0:
            self._timer.start(self._timeout_ms)
        log = _logger.info if level == "success" else _logger.warning
        log("notify %s: %s", level, text)

    def _place(self) -> None:
        parent = self.parentWidget()
        width = max(200, parent.width() - 40)
        self.setFixedWidth(width)
        self.adjustSize()
        self.move((parent.width() - width) // 2, parent.height() - self.height() - 20)


class ModalDialog(QDialog):
    """Overlay dialog whose content is a ViewNode tree.

    Hiding it programmatically is silent; closing it by hand (Esc, window
    close) reports a dismissal.
    """

    def __init__(
        self,
        parent: QWidget,
        on_action: ActionCallback,
        on_dismiss: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self.setObjectName("modal")
        self.setModal(True)
        self.setMinimumWidth(360)
        self._builder = WidgetBuilder(on_action)
        self._layout = QVBoxLayout(self)
        self._built: BuiltView | None = None
        if on_dismiss is not None:
            self.rejected.connect(on_dismiss)

    @property
    def content(self) -> QWidget | None:
        return self._built.widget if self._built else None

    def init(self) -> None:
        super().hide()

    def set_content(self, node: ViewNode) -> None:
        if self._built is not None:
            old = self._built.widget
            self._layout.removeWidget(old)
            old.hide()
            old.deleteLater()
        self._built = self._builder.build(node, self)
        self._layout.addWidget(self._built.widget)

    def show(self) -> None:
        super().show()
        self.raise_()
        if self._built is not None and self._built.focus is not None:
            self._built.focus.setFocus(Qt.FocusReason.OtherFocusReason)

    def hide(self) -> None:
        super().hide()
