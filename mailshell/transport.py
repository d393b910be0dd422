"""Message channel between the window and the backend process.

A transport fires its ready callback exactly once; only after that may
``send`` be called. Inbound messages reach the single registered handler in
delivery order, one at a time, on the Qt event loop thread.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject, QProcess

from .exceptions import TransportError, TransportNotReadyError
from .logger import get_logger
from .protocol import encode_message

_logger = get_logger("transport")

MessageHandler = Callable[[Any], None]


class Transport:
    """Base channel: ready gating plus single-handler delivery."""

    def __init__(self) -> None:
        self._ready = False
        self._ready_callbacks: list[Callable[[], None]] = []
        self._handler: MessageHandler | None = None

    @property
    def is_ready(self) -> bool:
        return self._ready

    def on_ready(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the channel is ready (immediately if it already is)."""
        if self._ready:
            callback()
            return
        self._ready_callbacks.append(callback)

    def on_message(self, handler: MessageHandler) -> None:
        """Register the inbound handler. A second call replaces the first."""
        self._handler = handler

    def send(self, name: str, payload: Any = None) -> None:
        if not self._ready:
            raise TransportNotReadyError(f"send({name!r}) before transport ready")
        self._write(name, payload)

    def _write(self, name: str, payload: Any) -> None:
        raise NotImplementedError

    def _fire_ready(self) -> None:
        if self._ready:
            return
        self._ready = True
        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for cb in callbacks:
            cb()

    def _deliver(self, raw: Any) -> None:
        if self._handler is None:
            _logger.debug("no handler registered, dropping inbound message")
            return
        self._handler(raw)


class LoopbackTransport(Transport):
    """In-memory transport: records sends, lets the owner inject replies."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[tuple[str, Any]] = []

    def mark_ready(self) -> None:
        self._fire_ready()

    def deliver(self, name: str, payload: Any = None) -> None:
        raw: dict[str, Any] = {"name": name}
        if payload is not None:
            raw["payload"] = payload
        self._deliver(raw)

    def deliver_raw(self, raw: Any) -> None:
        self._deliver(raw)

    def _write(self, name: str, payload: Any) -> None:
        self.sent.append((name, payload))


class ProcessTransport(Transport):
    """Speaks newline-delimited JSON to a backend child process over stdio.

    Ready fires when the process has started. If the program cannot be
    executed, the failure callbacks receive a ``TransportError`` instead and
    ready never fires. Anything the backend writes to stderr is forwarded to
    the log.
    """

    def __init__(self, command: list[str], parent: QObject | None = None) -> None:
        super().__init__()
        if not command:
            raise TransportError("empty backend command")
        self._command = list(command)
        self._buffer = bytearray()
        self._proc = QProcess(parent)
        self._proc.setProgram(self._command[0])
        self._proc.setArguments(self._command[1:])
        self._proc.started.connect(self._on_started)
        self._proc.readyReadStandardOutput.connect(self._on_stdout)
        self._proc.readyReadStandardError.connect(self._on_stderr)
        self._proc.errorOccurred.connect(self._on_error)
        self._proc.finished.connect(self._on_finished)
        self._finished_callbacks: list[Callable[[int], None]] = []
        self._failed_callbacks: list[Callable[[TransportError], None]] = []

    @property
    def process(self) -> QProcess:
        return self._proc

    def on_finished(self, callback: Callable[[int], None]) -> None:
        self._finished_callbacks.append(callback)

    def on_failed(self, callback: Callable[[TransportError], None]) -> None:
        self._failed_callbacks.append(callback)

    def start(self) -> None:
        _logger.info("starting backend: %s", " ".join(self._command))
        self._proc.start()

    def stop(self, timeout_ms: int = 3000) -> None:
        if self._proc.state() == QProcess.ProcessState.NotRunning:
            return
        self._proc.closeWriteChannel()
        if not self._proc.waitForFinished(timeout_ms):
            _logger.warning("backend did not exit in %d ms, killing", timeout_ms)
            self._proc.kill()
            self._proc.waitForFinished(timeout_ms)

    def _write(self, name: str, payload: Any) -> None:
        data = encode_message(name, payload)
        written = self._proc.write(data)
        if written != len(data):
            raise TransportError(f"short write sending {name!r}: {written}/{len(data)}")
        _logger.debug("sent %s", name)

    def _on_started(self) -> None:
        _logger.debug("backend started (pid=%s)", self._proc.processId())
        self._fire_ready()

    def _on_stdout(self) -> None:
        self._buffer.extend(bytes(self._proc.readAllStandardOutput()))
        while True:
            idx = self._buffer.find(b"\n")
            if idx < 0:
                break
            line = bytes(self._buffer[:idx]).strip()
            del self._buffer[: idx + 1]
            if not line:
                continue
            try:
                raw = json.loads(line.decode("utf-8"))
            except ValueError as e:
                _logger.warning("undecodable line from backend: %s", e)
                continue
            self._deliver(raw)

    def _on_stderr(self) -> None:
        text = bytes(self._proc.readAllStandardError()).decode("utf-8", errors="replace")
        for line in text.splitlines():
            if line.strip():
                _logger.info("backend: %s", line.rstrip())

    def _on_error(self, error: QProcess.ProcessError) -> None:
        _logger.error("backend process error: %s (%s)", error, self._proc.errorString())
        if error != QProcess.ProcessError.FailedToStart:
            return
        # Qt emits no finished signal for a process that never started.
        exc = TransportError(f"backend could not start: {self._command[0]}: {self._proc.errorString()}")
        for cb in list(self._failed_callbacks):
            cb(exc)

    def _on_finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        _logger.info("backend exited: code=%d status=%s", exit_code, exit_status)
        for cb in list(self._finished_callbacks):
            cb(exit_code)
