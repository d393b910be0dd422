from __future__ import annotations

from typing import Any

from .logger import get_logger
from .protocol import ResourceProfile
from .transport import Transport
from .widgets import Loader

_logger = get_logger("commands")


class CommandEmitter:
    """Turns user intents into outbound commands.

    Every command shows the loader first; the next inbound message, whatever
    it is, hides it again. Values are sent exactly as given: no trimming or
    validation happens on this side.
    """

    def __init__(self, transport: Transport, loader: Loader, profile: ResourceProfile) -> None:
        self._transport = transport
        self._loader = loader
        self._profile = profile

    def _send(self, name: str, payload: Any = None) -> None:
        self._loader.show()
        _logger.debug("command %s", name)
        self._transport.send(name, payload)

    def request_index(self) -> None:
        self._send(self._profile.auth_command("index"))

    def login(self, password: str) -> None:
        self._send(self._profile.auth_command("login"), password)

    def sign_up(self, password: str) -> None:
        self._send(self._profile.auth_command("sign_up"), password)

    def logout(self) -> None:
        self._send(self._profile.auth_command("logout"))

    def list_resources(self) -> None:
        self._send(self._profile.command("list"))

    def add_resource(self, value: str) -> None:
        self._send(self._profile.command("add"), value)

    def open_resource(self, address: str, password: str) -> None:
        self._send(self._profile.command("open"), {self._profile.name: address, "password": password})
