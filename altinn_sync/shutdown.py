"""Run cancellation via SIGTERM / SIGINT."""

from __future__ import annotations

import asyncio
import signal
from collections.abc import Callable

import structlog

logger = structlog.get_logger()

CANCEL_SIGNALS = (signal.SIGTERM, signal.SIGINT)


def install_signal_handlers(cancel_event: asyncio.Event) -> Callable[[], None]:
    """Make SIGTERM and SIGINT set *cancel_event* instead of killing the process.

    The sync engine checks the event between messages and attachments, so
    the tenant in progress stops without writing its watermark. Returns a
    function that restores the default handlers.
    """
    loop = asyncio.get_running_loop()

    def _handle(sig: signal.Signals) -> None:
        if cancel_event.is_set():
            logger.warning("sync_already_cancelling", signal=sig.name)
            return
        logger.info("sync_cancel_requested", signal=sig.name)
        cancel_event.set()

    for sig in CANCEL_SIGNALS:
        loop.add_signal_handler(sig, _handle, sig)

    def _uninstall() -> None:
        for sig in CANCEL_SIGNALS:
            loop.remove_signal_handler(sig)

    return _uninstall
