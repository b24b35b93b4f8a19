"""
Process-level fatal error boundary

Anything that escapes every other handler is logged and the process exits
with status 1. The process supervisor is responsible for restarting it.
"""

import os
import sys
import logging
import asyncio
import threading

logger = logging.getLogger(__name__)

EXIT_CODE = 1


def _exit():
    logging.shutdown()
    os._exit(EXIT_CODE)


def _excepthook(exc_type, exc_value, exc_traceback):
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("Uncaught exception, shutting down", exc_info=(exc_type, exc_value, exc_traceback))
    _exit()


def _threading_excepthook(args: threading.ExceptHookArgs):
    if args.exc_type is SystemExit:
        return
    logger.critical(
        f"Uncaught exception in thread {args.thread.name if args.thread else '?'}, shutting down",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )
    _exit()


def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: dict):
    exc = context.get("exception")
    if exc is None or isinstance(exc, (ConnectionError, asyncio.CancelledError)):
        # Dropped client connections and warnings are not fatal
        loop.default_exception_handler(context)
        return
    logger.critical(
        f"Unhandled error in event loop: {context.get('message', 'no message')}, shutting down",
        exc_info=exc,
    )
    _exit()


def install_fatal_handlers() -> None:
    """Route uncaught exceptions in the main thread and worker threads to the boundary."""
    sys.excepthook = _excepthook
    threading.excepthook = _threading_excepthook


def install_loop_handler(loop: asyncio.AbstractEventLoop) -> None:
    """Route unretrieved task exceptions on loop to the boundary."""
    loop.set_exception_handler(_loop_exception_handler)
