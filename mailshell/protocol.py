"""Wire protocol between the window and the backend process.

Both directions exchange ``{"name": str, "payload": Any}`` objects. Names are
dot-segmented tags; there is no correlation id, so a reply is recognised only
by its name.

Inbound messages are decoded in two steps: first into a raw name/payload pair,
then into a typed :class:`Message` whose ``kind`` belongs to the closed
:class:`MessageKind` enum. Names the client does not know map to
``MessageKind.UNKNOWN`` and are ignored by the dispatcher.

Payload schemas per inbound kind (coerced here, never raised on):

- ``ERROR`` / ``RESOURCE_ADDED``: text, ``""`` when absent
- ``INDEXED``: :class:`AuthMode`, anything other than ``"index"`` or
  ``"login"`` is ``SIGNUP``
- ``RESOURCE_LISTED``: tuple of :class:`ResourceItem`, ``()`` when absent
- all other kinds: ``None``
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .logger import get_logger

_logger = get_logger("protocol")


class MessageKind(str, Enum):
    ERROR = "error"
    INDEXED = "indexed"
    LOGGED_IN = "logged.in"
    LOGGED_OUT = "logged.out"
    SIGNED_UP = "signed.up"
    RESOURCE_ADDED = "added"
    RESOURCE_LISTED = "listed"
    RESOURCE_OPENED = "opened"
    UNKNOWN = "unknown"


class AuthMode(str, Enum):
    INDEX = "index"
    LOGIN = "login"
    SIGNUP = "signup"


class Dialect(str, Enum):
    """Spelling of the outbound authentication commands."""

    BARE = "bare"
    NAMESPACED = "namespaced"


# Inbound names that do not depend on the resource profile.
_STATIC_NAMES: dict[str, MessageKind] = {
    "error": MessageKind.ERROR,
    "indexed": MessageKind.INDEXED,
    "index.show": MessageKind.INDEXED,
    "logged.in": MessageKind.LOGGED_IN,
    "index.logged.in": MessageKind.LOGGED_IN,
    "logged.out": MessageKind.LOGGED_OUT,
    "signed.up": MessageKind.SIGNED_UP,
    "index.signed.up": MessageKind.SIGNED_UP,
}

_RESOURCE_VERBS: dict[str, MessageKind] = {
    "added": MessageKind.RESOURCE_ADDED,
    "listed": MessageKind.RESOURCE_LISTED,
    "opened": MessageKind.RESOURCE_OPENED,
}

_AUTH_COMMANDS: dict[Dialect, dict[str, str]] = {
    Dialect.BARE: {"index": "index", "login": "login", "sign_up": "sign.up", "logout": "logout"},
    Dialect.NAMESPACED: {
        "index": "index.show",
        "login": "index.login",
        "sign_up": "index.sign.up",
        "logout": "logout",
    },
}

# Keys that may carry a resource address inside a listed entry.
_ADDRESS_KEYS = ("addr", "address", "email", "account", "resource")
# Keys that may hold the entry list when the listed payload is a mapping.
_LIST_KEYS = ("emails", "accounts", "items", "resources")


@dataclass(frozen=True)
class ResourceItem:
    address: str
    auth_url: str = ""


@dataclass(frozen=True)
class ResourceProfile:
    """Which domain object the window manages and what it may do with it."""

    name: str
    label: str
    supports_open: bool = False
    supports_logout: bool = True
    dialect: Dialect = Dialect.BARE

    def command(self, verb: str) -> str:
        return f"{self.name}.{verb}"

    def auth_command(self, action: str) -> str:
        return _AUTH_COMMANDS[self.dialect][action]


BUILTIN_PROFILES: dict[str, ResourceProfile] = {
    "account": ResourceProfile("account", "Account", supports_open=False, supports_logout=True),
    "email": ResourceProfile("email", "Email", supports_open=True, supports_logout=False),
}


def build_profile(
    resource: str,
    *,
    dialect: str | Dialect = Dialect.BARE,
    supports_open: bool | None = None,
    supports_logout: bool | None = None,
) -> ResourceProfile:
    """Return a profile for ``resource``, applying optional overrides.

    Unknown resource names get a generic profile labelled after the name.
    """
    name = str(resource or "account").strip().lower() or "account"
    base = BUILTIN_PROFILES.get(name) or ResourceProfile(name, name.replace(".", " ").title())
    try:
        dia = Dialect(dialect)
    except ValueError:
        _logger.warning("unknown dialect %r, using %s", dialect, Dialect.BARE.value)
        dia = Dialect.BARE
    return ResourceProfile(
        name=base.name,
        label=base.label,
        supports_open=base.supports_open if supports_open is None else bool(supports_open),
        supports_logout=base.supports_logout if supports_logout is None else bool(supports_logout),
        dialect=dia,
    )


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    name: str
    payload: Any = None


def decode_raw(raw: Any) -> tuple[str, Any]:
    """Turn whatever the transport delivered into a ``(name, payload)`` pair.

    Accepts a mapping, a JSON string or JSON bytes. Anything unusable yields
    an empty name, which later maps to ``UNKNOWN``.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return "", None
    if not isinstance(raw, Mapping):
        return "", None
    name = raw.get("name")
    if not isinstance(name, str):
        return "", None
    return name, raw.get("payload")


def classify(name: str, profile: ResourceProfile) -> MessageKind:
    kind = _STATIC_NAMES.get(name)
    if kind is not None:
        return kind
    prefix, _, verb = name.rpartition(".")
    if prefix == profile.name:
        return _RESOURCE_VERBS.get(verb, MessageKind.UNKNOWN)
    return MessageKind.UNKNOWN


def coerce_text(payload: Any) -> str:
    if payload is None:
        return ""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, Mapping):
        for key in ("message", "label", "error"):
            val = payload.get(key)
            if isinstance(val, str):
                return val
    return str(payload)


def coerce_auth_mode(payload: Any) -> AuthMode:
    if payload == AuthMode.INDEX.value:
        return AuthMode.INDEX
    if payload == AuthMode.LOGIN.value:
        return AuthMode.LOGIN
    return AuthMode.SIGNUP


def _coerce_item(entry: Any, shared_auth_url: str) -> ResourceItem | None:
    if isinstance(entry, str):
        return ResourceItem(entry, shared_auth_url)
    if isinstance(entry, Mapping):
        for key in _ADDRESS_KEYS:
            addr = entry.get(key)
            if isinstance(addr, str) and addr:
                url = entry.get("auth_url")
                return ResourceItem(addr, url if isinstance(url, str) else shared_auth_url)
    return None


def coerce_resource_items(payload: Any) -> tuple[ResourceItem, ...]:
    shared_url = ""
    entries: Any = payload
    if isinstance(payload, Mapping):
        url = payload.get("google_auth_url") or payload.get("auth_url")
        shared_url = url if isinstance(url, str) else ""
        entries = next((payload[k] for k in _LIST_KEYS if k in payload), None)
    if entries is None or isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
        return ()
    items: list[ResourceItem] = []
    for entry in entries:
        item = _coerce_item(entry, shared_url)
        if item is None:
            _logger.debug("skipping unusable list entry: %r", entry)
            continue
        items.append(item)
    return tuple(items)


_COERCERS = {
    MessageKind.ERROR: coerce_text,
    MessageKind.RESOURCE_ADDED: coerce_text,
    MessageKind.INDEXED: coerce_auth_mode,
    MessageKind.RESOURCE_LISTED: coerce_resource_items,
}


def decode_message(raw: Any, profile: ResourceProfile) -> Message:
    name, payload = decode_raw(raw)
    kind = classify(name, profile) if name else MessageKind.UNKNOWN
    coerce = _COERCERS.get(kind)
    value = coerce(payload) if coerce is not None else None
    return Message(kind=kind, name=name, payload=value)


def encode_message(name: str, payload: Any = None) -> bytes:
    """Serialize an outbound message as one newline-terminated JSON line."""
    obj: dict[str, Any] = {"name": name}
    if payload is not None:
        obj["payload"] = payload
    return (json.dumps(obj, ensure_ascii=False) + "\n").encode("utf-8")
