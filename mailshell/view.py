"""View states and the pure renderer.

``render_view(state, profile)`` returns a :class:`ViewNode` tree describing the
whole main view. The tree is rebuilt on every transition and the Qt host
replaces its widgets wholesale; nothing is patched incrementally. Modal
contents are described with the same node type.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .protocol import AuthMode, ResourceItem, ResourceProfile


class NodeKind(str, Enum):
    PAGE = "page"
    FORM = "form"
    HEADER = "header"
    LIST = "list"
    ROW = "row"
    LABEL = "label"
    BUTTON = "button"
    INPUT = "input"
    PASSWORD = "password"


class Action(str, Enum):
    LOGIN = "login"
    SIGN_UP = "sign_up"
    LOGOUT = "logout"
    ADD = "add"
    SUBMIT_ADD = "submit_add"
    REFRESH = "refresh"
    AUTHORIZE = "authorize"
    OPEN = "open"
    SUBMIT_OPEN = "submit_open"


@dataclass(frozen=True)
class ViewNode:
    kind: NodeKind
    key: str = ""
    # Label/button text, or the placeholder of an input.
    text: str = ""
    tooltip: str = ""
    action: Action | None = None
    payload: Any = None
    focus: bool = False
    # Inputs only: the action fired when Return is pressed.
    submit: Action | None = None
    children: tuple[ViewNode, ...] = ()

    def walk(self) -> Iterator[ViewNode]:
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, key: str) -> ViewNode | None:
        return next((n for n in self.walk() if n.key == key), None)

    def find_all(self, kind: NodeKind) -> list[ViewNode]:
        return [n for n in self.walk() if n.kind == kind]


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class AuthForm:
    mode: AuthMode


@dataclass(frozen=True)
class ResourceList:
    items: tuple[ResourceItem, ...] = ()


@dataclass(frozen=True)
class ResourceDetail:
    pass


ViewState = Union[Loading, AuthForm, ResourceList, ResourceDetail]


@dataclass(frozen=True)
class ModalState:
    visible: bool = False
    content: ViewNode | None = None


MODAL_HIDDEN = ModalState()

PASSWORD_KEY = "password"
RESOURCE_KEY = "resource"


def _auth_form(mode: AuthMode) -> ViewNode:
    if mode == AuthMode.LOGIN:
        action, text, key = Action.LOGIN, "Login", "btn-login"
    else:
        action, text, key = Action.SIGN_UP, "Sign up", "btn-signup"
    return ViewNode(
        NodeKind.PAGE,
        key=f"auth.{mode.value}",
        children=(
            ViewNode(
                NodeKind.FORM,
                key="auth-form",
                children=(
                    ViewNode(NodeKind.PASSWORD, key=PASSWORD_KEY, text="Password", focus=True, submit=action),
                    ViewNode(NodeKind.BUTTON, key=key, text=text, action=action),
                ),
            ),
        ),
    )


def _header(profile: ResourceProfile) -> ViewNode:
    label = profile.label.lower()
    buttons = [
        ViewNode(NodeKind.BUTTON, key="btn-add", text="+", tooltip=f"Add a new {label}", action=Action.ADD),
        ViewNode(
            NodeKind.BUTTON, key="btn-refresh", text="⟳", tooltip=f"Refresh {label}s list", action=Action.REFRESH
        ),
    ]
    if profile.supports_logout:
        buttons.append(ViewNode(NodeKind.BUTTON, key="btn-logout", text="Log out", tooltip="Log out", action=Action.LOGOUT))
    return ViewNode(NodeKind.HEADER, key="header", children=tuple(buttons))


def _row(index: int, item: ResourceItem, profile: ResourceProfile) -> ViewNode:
    controls: list[ViewNode] = []
    if item.auth_url:
        controls.append(
            ViewNode(
                NodeKind.BUTTON,
                key=f"row-{index}-authorize",
                text="Authorize",
                tooltip=item.auth_url,
                action=Action.AUTHORIZE,
                payload=item.auth_url,
            )
        )
    if profile.supports_open:
        controls.append(
            ViewNode(NodeKind.BUTTON, key=f"row-{index}-open", text="Open", action=Action.OPEN, payload=item.address)
        )
    return ViewNode(NodeKind.ROW, key=f"row-{index}", text=item.address, payload=item, children=tuple(controls))


def _resource_list(items: tuple[ResourceItem, ...], profile: ResourceProfile) -> ViewNode:
    rows = tuple(_row(i, item, profile) for i, item in enumerate(items))
    return ViewNode(
        NodeKind.PAGE,
        key="list",
        children=(_header(profile), ViewNode(NodeKind.LIST, key="items", children=rows)),
    )


def render_view(state: ViewState, profile: ResourceProfile) -> ViewNode:
    if isinstance(state, AuthForm):
        return _auth_form(state.mode)
    if isinstance(state, ResourceList):
        return _resource_list(state.items, profile)
    if isinstance(state, ResourceDetail):
        return ViewNode(
            NodeKind.PAGE,
            key="detail",
            children=(
                ViewNode(NodeKind.LABEL, key="detail-title", text=f"{profile.label} opened"),
                ViewNode(NodeKind.BUTTON, key="btn-back", text="Back", action=Action.REFRESH),
            ),
        )
    return ViewNode(NodeKind.PAGE, key="loading", children=(ViewNode(NodeKind.LABEL, text="Loading…"),))


def add_resource_form(profile: ResourceProfile) -> ViewNode:
    return ViewNode(
        NodeKind.FORM,
        key="modal.add",
        children=(
            ViewNode(NodeKind.INPUT, key=RESOURCE_KEY, text=profile.label, focus=True, submit=Action.SUBMIT_ADD),
            ViewNode(NodeKind.BUTTON, key="btn-submit-add", text="Add", action=Action.SUBMIT_ADD),
        ),
    )


def open_resource_form(address: str) -> ViewNode:
    return ViewNode(
        NodeKind.FORM,
        key="modal.open",
        children=(
            ViewNode(NodeKind.LABEL, key="open-address", text=address),
            ViewNode(
                NodeKind.PASSWORD,
                key=PASSWORD_KEY,
                text="Password",
                focus=True,
                submit=Action.SUBMIT_OPEN,
                payload=address,
            ),
            ViewNode(NodeKind.BUTTON, key="btn-submit-open", text="Open", action=Action.SUBMIT_OPEN, payload=address),
        ),
    )
