from __future__ import annotations

import sys
import time

import pytest
from PySide6.QtWidgets import QApplication

from mailshell.exceptions import TransportError, TransportNotReadyError
from mailshell.transport import LoopbackTransport, ProcessTransport

# Answers every inbound line with "indexed"/"login"; emits one garbage line first.
_ECHO_BACKEND = r"""
import json, sys
print("not json", flush=True)
for line in sys.stdin:
    msg = json.loads(line)
    print(json.dumps({"name": "indexed", "payload": "login", "echo": msg["name"]}), flush=True)
"""


def test_send_before_ready_is_rejected():
    t = LoopbackTransport()
    with pytest.raises(TransportNotReadyError):
        t.send("index")
    assert t.sent == []


def test_ready_fires_once_and_late_callbacks_run_immediately():
    t = LoopbackTransport()
    fired: list[str] = []
    t.on_ready(lambda: fired.append("early"))
    t.mark_ready()
    t.mark_ready()
    t.on_ready(lambda: fired.append("late"))
    assert fired == ["early", "late"]
    assert t.is_ready


def test_second_handler_replaces_first():
    t = LoopbackTransport()
    first: list[object] = []
    second: list[object] = []
    t.on_message(first.append)
    t.on_message(second.append)
    t.deliver("error", "x")
    assert first == []
    assert second == [{"name": "error", "payload": "x"}]


def test_messages_delivered_in_order():
    t = LoopbackTransport()
    got: list[str] = []
    t.on_message(lambda raw: got.append(raw["name"]))
    for name in ("a", "b", "c"):
        t.deliver(name)
    assert got == ["a", "b", "c"]


def test_process_transport_requires_command():
    with pytest.raises(TransportError):
        ProcessTransport([])


def test_process_transport_round_trip():
    t = ProcessTransport([sys.executable, "-u", "-c", _ECHO_BACKEND])
    received: list[dict] = []
    t.on_message(received.append)
    ready: list[bool] = []
    t.on_ready(lambda: ready.append(True))

    t.start()
    try:
        assert t.process.waitForStarted(10000)
        assert ready == [True]

        t.send("index")
        deadline = time.monotonic() + 10
        while not received and time.monotonic() < deadline:
            t.process.waitForReadyRead(200)

        # The garbage line is skipped; only the JSON reply arrives.
        assert received == [{"name": "indexed", "payload": "login", "echo": "index"}]
    finally:
        t.stop()


def _wait_for(predicate, proc, timeout_s: float = 10) -> None:
    deadline = time.monotonic() + timeout_s
    while not predicate() and time.monotonic() < deadline:
        proc.waitForStarted(100)
        QApplication.processEvents()


def test_missing_backend_program_reports_failure():
    t = ProcessTransport(["/nonexistent/mailshell-backend"])
    ready: list[bool] = []
    finished: list[int] = []
    failures: list[TransportError] = []
    t.on_ready(lambda: ready.append(True))
    t.on_finished(finished.append)
    t.on_failed(failures.append)

    t.start()
    _wait_for(lambda: failures, t.process)

    assert len(failures) == 1
    assert "/nonexistent/mailshell-backend" in str(failures[0])
    assert ready == []
    assert not t.is_ready
    with pytest.raises(TransportNotReadyError):
        t.send("index")
