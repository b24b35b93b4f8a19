"""Process-level fatal error boundary."""
import asyncio
import sys
import threading

import pytest

from folio.shared import fatal


@pytest.fixture
def exits(monkeypatch):
    calls = []
    monkeypatch.setattr(fatal, "_exit", lambda: calls.append(True))
    return calls


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    fatal.install_loop_handler(loop)
    yield loop
    loop.close()


def test_unhandled_loop_error_exits(loop, exits):
    loop.call_exception_handler({"message": "task blew up", "exception": RuntimeError("boom")})
    assert exits == [True]


@pytest.mark.parametrize("context", [
    {"message": "client went away", "exception": ConnectionResetError()},
    {"message": "just a warning"},
])
def test_benign_loop_errors_are_not_fatal(loop, exits, context):
    loop.call_exception_handler(context)
    assert exits == []


def test_uncaught_exception_exits(exits):
    try:
        raise ValueError("escaped")
    except ValueError:
        fatal._excepthook(*sys.exc_info())
    assert exits == [True]


def test_thread_exception_exits(exits):
    try:
        raise RuntimeError("worker died")
    except RuntimeError:
        exc_type, exc_value, exc_traceback = sys.exc_info()
    args = threading.ExceptHookArgs([exc_type, exc_value, exc_traceback, threading.current_thread()])
    fatal._threading_excepthook(args)
    assert exits == [True]


def test_thread_system_exit_is_ignored(exits):
    args = threading.ExceptHookArgs([SystemExit, SystemExit(), None, None])
    fatal._threading_excepthook(args)
    assert exits == []


def test_install_fatal_handlers(monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.__excepthook__)
    monkeypatch.setattr(threading, "excepthook", threading.__excepthook__)
    fatal.install_fatal_handlers()
    assert sys.excepthook is fatal._excepthook
    assert threading.excepthook is fatal._threading_excepthook
