"""Client session: the view state machine.

One :class:`ClientSession` is built at startup and owns the current view
state, the modal state, the transport and the widget capabilities. Inbound
messages arrive through the dispatcher; user actions arrive through
:meth:`ClientSession.handle_action`.

The session never decides locally whether the user is logged in. Login,
logout and signup replies all trigger a fresh index request, and the
backend's answer picks the screen.

There is no request/response correlation. A reply that arrives after the
user has already moved on (e.g. a late ``listed`` after logging out) is
applied as if it were current.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .commands import CommandEmitter
from .dispatcher import MessageDispatcher
from .logger import get_logger
from .protocol import AuthMode, Message, MessageKind, ResourceProfile
from .transport import Transport
from .view import (
    MODAL_HIDDEN,
    PASSWORD_KEY,
    RESOURCE_KEY,
    Action,
    AuthForm,
    Loading,
    ModalState,
    ResourceDetail,
    ResourceList,
    ViewNode,
    ViewState,
    add_resource_form,
    open_resource_form,
    render_view,
)
from .widgets import WidgetSet

_logger = get_logger("session")

Renderer = Callable[[ViewNode], None]
UrlOpener = Callable[[str], None]


class ClientSession:
    def __init__(
        self,
        transport: Transport,
        widgets: WidgetSet,
        profile: ResourceProfile,
        renderer: Renderer,
        url_opener: UrlOpener | None = None,
    ) -> None:
        self._transport = transport
        self._widgets = widgets
        self._profile = profile
        self._renderer = renderer
        self._url_opener = url_opener
        self._started = False
        self._bootstrapped = False

        self.view_state: ViewState = Loading()
        self.modal_state: ModalState = MODAL_HIDDEN

        self.commands = CommandEmitter(transport, widgets.loader, profile)
        self.dispatcher = MessageDispatcher(
            widgets.loader,
            profile,
            {
                MessageKind.ERROR: self._on_error,
                MessageKind.RESOURCE_ADDED: self._on_resource_added,
                MessageKind.RESOURCE_LISTED: self._on_resource_listed,
                MessageKind.RESOURCE_OPENED: self._on_resource_opened,
                MessageKind.INDEXED: self._on_indexed,
                MessageKind.LOGGED_IN: self._resync,
                MessageKind.LOGGED_OUT: self._resync,
                MessageKind.SIGNED_UP: self._resync,
            },
        )

    @property
    def profile(self) -> ResourceProfile:
        return self._profile

    def start(self) -> None:
        """Initialize widgets, show the loading view and wait for the channel."""
        if self._started:
            return
        self._started = True
        self._widgets.init_all()
        self._render()
        self._transport.on_message(self.dispatcher.dispatch)
        self._transport.on_ready(self._on_transport_ready)

    def _on_transport_ready(self) -> None:
        if self._bootstrapped:
            return
        self._bootstrapped = True
        _logger.debug("transport ready, requesting index")
        self.commands.request_index()

    # ---- state helpers ----

    def _set_view(self, state: ViewState) -> None:
        self.view_state = state
        self._render()

    def _render(self) -> None:
        self._renderer(render_view(self.view_state, self._profile))

    def _show_modal(self, content: ViewNode) -> None:
        self._widgets.modaler.set_content(content)
        self._widgets.modaler.show()
        self.modal_state = ModalState(visible=True, content=content)

    def _hide_modal(self) -> None:
        self._widgets.modaler.hide()
        self.modal_state = MODAL_HIDDEN

    # ---- inbound handlers ----

    def _on_error(self, message: Message) -> None:
        self._widgets.notifier.error(message.payload)

    def _on_resource_added(self, message: Message) -> None:
        self._hide_modal()
        self._widgets.notifier.success(message.payload)
        self.commands.list_resources()

    def _on_resource_listed(self, message: Message) -> None:
        self._set_view(ResourceList(message.payload))

    def _on_resource_opened(self, message: Message) -> None:
        if self.modal_state.visible:
            self._hide_modal()
        self._set_view(ResourceDetail())

    def _on_indexed(self, message: Message) -> None:
        mode: AuthMode = message.payload
        if mode == AuthMode.INDEX:
            self.commands.list_resources()
            return
        self._set_view(AuthForm(mode))

    def _resync(self, message: Message) -> None:
        _logger.debug("%s received, resyncing index", message.name)
        self.commands.request_index()

    # ---- user actions ----

    def dismiss_modal(self) -> None:
        """The user closed the modal without submitting."""
        if self.modal_state.visible:
            self._hide_modal()

    def handle_action(self, action: Action, payload: Any = None, values: Mapping[str, str] | None = None) -> None:
        values = values or {}
        if action == Action.LOGIN:
            self.commands.login(values.get(PASSWORD_KEY, ""))
        elif action == Action.SIGN_UP:
            self.commands.sign_up(values.get(PASSWORD_KEY, ""))
        elif action == Action.LOGOUT:
            if self._profile.supports_logout:
                self.commands.logout()
        elif action == Action.ADD:
            self._show_modal(add_resource_form(self._profile))
        elif action == Action.SUBMIT_ADD:
            self.commands.add_resource(values.get(RESOURCE_KEY, ""))
        elif action == Action.REFRESH:
            self.commands.list_resources()
        elif action == Action.AUTHORIZE:
            if payload and self._url_opener is not None:
                self._url_opener(str(payload))
        elif action == Action.OPEN:
            if self._profile.supports_open and payload:
                self._show_modal(open_resource_form(str(payload)))
        elif action == Action.SUBMIT_OPEN:
            if self._profile.supports_open and payload:
                self.commands.open_resource(str(payload), values.get(PASSWORD_KEY, ""))
        else:
            _logger.warning("unhandled action: %s", action)
