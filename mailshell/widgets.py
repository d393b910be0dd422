"""Capability contracts for the generic widgets the session drives.

The session never reads widget state back; every call is a fire-and-forget
command. Qt implementations live in :mod:`mailshell.ui_widgets`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .view import ViewNode


class Loader(Protocol):
    def init(self) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...


class Notifier(Protocol):
    def init(self) -> None: ...

    def success(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...


class Modaler(Protocol):
    def init(self) -> None: ...

    def set_content(self, node: ViewNode) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...


@dataclass
class WidgetSet:
    loader: Loader
    notifier: Notifier
    modaler: Modaler

    def init_all(self) -> None:
        self.loader.init()
        self.notifier.init()
        self.modaler.init()
