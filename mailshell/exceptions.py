"""Exception types raised by the client."""


class MailshellError(Exception):
    """Base class for client errors."""


class TransportError(MailshellError):
    """The backend channel could not be started or written to."""


class TransportNotReadyError(TransportError):
    """A command was sent before the transport fired its ready signal.

    This is a programming error: every send must be gated behind ``on_ready``.
    """
