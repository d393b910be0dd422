from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from .logger import get_logger
from .view import Action, NodeKind, ViewNode

_logger = get_logger("ui_view")

ActionCallback = Callable[[Action, Any, Mapping[str, str]], None]


@dataclass
class BuiltView:
    widget: QWidget | None = None
    inputs: dict[str, QLineEdit] = field(default_factory=dict)
    focus: QWidget | None = None

    def values(self) -> dict[str, str]:
        return {key: edit.text() for key, edit in self.inputs.items()}


class WidgetBuilder:
    """Materializes a ViewNode tree into fresh Qt widgets.

    Button clicks and Return in an input call ``on_action`` with the values of
    every input in the same tree, read at the moment of the event.
    """

    def __init__(self, on_action: ActionCallback) -> None:
        self._on_action = on_action

    def build(self, node: ViewNode, parent: QWidget | None = None) -> BuiltView:
        built = BuiltView()
        built.widget = self._build_node(node, built, parent)
        return built

    def _fire(self, built: BuiltView, action: Action | None, payload: Any, *_signal_args: Any) -> None:
        # QPushButton.clicked passes `checked`, which is ignored.
        if action is None:
            return
        self._on_action(action, payload, built.values())

    def _build_node(self, node: ViewNode, built: BuiltView, parent: QWidget | None) -> QWidget:
        kind = node.kind
        if kind == NodeKind.BUTTON:
            w: QWidget = QPushButton(node.text, parent)
            w.clicked.connect(partial(self._fire, built, node.action, node.payload))
        elif kind in (NodeKind.INPUT, NodeKind.PASSWORD):
            edit = QLineEdit(parent)
            edit.setPlaceholderText(node.text)
            if kind == NodeKind.PASSWORD:
                edit.setEchoMode(QLineEdit.EchoMode.Password)
            edit.returnPressed.connect(partial(self._fire, built, node.submit, node.payload))
            if node.key:
                built.inputs[node.key] = edit
            w = edit
        elif kind == NodeKind.LABEL:
            w = QLabel(node.text, parent)
            w.setAlignment(Qt.AlignmentFlag.AlignCenter)
        elif kind == NodeKind.ROW:
            w = self._build_row(node, built, parent)
        elif kind == NodeKind.HEADER:
            w = QWidget(parent)
            lay = QHBoxLayout(w)
            lay.setContentsMargins(0, 0, 0, 0)
            for child in node.children:
                lay.addWidget(self._build_node(child, built, w))
            lay.addStretch(1)
        elif kind == NodeKind.LIST:
            w = self._build_list(node, built, parent)
        else:
            w = self._build_box(node, built, parent)

        if node.key:
            w.setObjectName(node.key)
        if node.tooltip:
            w.setToolTip(node.tooltip)
        if node.focus and built.focus is None:
            built.focus = w
        return w

    def _build_box(self, node: ViewNode, built: BuiltView, parent: QWidget | None) -> QWidget:
        w = QWidget(parent)
        lay = QVBoxLayout(w)
        centered = node.kind == NodeKind.FORM
        if centered:
            lay.addStretch(1)
        for child in node.children:
            lay.addWidget(self._build_node(child, built, w))
        lay.addStretch(1)
        return w

    def _build_row(self, node: ViewNode, built: BuiltView, parent: QWidget | None) -> QWidget:
        w = QFrame(parent)
        w.setProperty("role", "row")
        lay = QHBoxLayout(w)
        text = QLabel(node.text, w)
        text.setObjectName(f"{node.key}-text")
        lay.addWidget(text)
        lay.addStretch(1)
        for child in node.children:
            lay.addWidget(self._build_node(child, built, w))
        return w

    def _build_list(self, node: ViewNode, built: BuiltView, parent: QWidget | None) -> QWidget:
        area = QScrollArea(parent)
        area.setWidgetResizable(True)
        inner = QWidget(area)
        lay = QVBoxLayout(inner)
        lay.setContentsMargins(0, 0, 0, 0)
        for child in node.children:
            lay.addWidget(self._build_node(child, built, inner))
        lay.addStretch(1)
        area.setWidget(inner)
        return area


class ViewHost(QWidget):
    """Hosts the single main view; every render replaces all of its content."""

    def __init__(self, on_action: ActionCallback, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setObjectName("index")
        self._builder = WidgetBuilder(on_action)
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(12, 12, 12, 12)
        self._built: BuiltView | None = None
        self.current: ViewNode | None = None

    @property
    def focus_target(self) -> QWidget | None:
        return self._built.focus if self._built else None

    @property
    def content(self) -> QWidget | None:
        return self._built.widget if self._built else None

    def render(self, node: ViewNode) -> None:
        if self._built is not None:
            old = self._built.widget
            self._layout.removeWidget(old)
            old.hide()
            old.deleteLater()
        self._built = self._builder.build(node, self)
        self._layout.addWidget(self._built.widget)
        self.current = node
        if self._built.focus is not None:
            self._built.focus.setFocus(Qt.FocusReason.OtherFocusReason)
        _logger.debug("rendered view %s", node.key)
