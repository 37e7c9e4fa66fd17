#!/usr/bin/env python3
"""Bridge entry point.

This module wires the pieces of a bridge together: certificate loading, the
clipboard, the change watcher, the outbound queue and the broker session.
The watcher runs on its own thread and hands detected changes to the
asyncio loop through a FIFO queue; the broker side runs as asyncio tasks.

SIGINT and SIGTERM request a clean shutdown. A watcher thread that dies
ends the bridge with ClipboardAccessError. The watcher is stopped on every
exit path.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Awaitable

from mqclipsync.bridge_retry import run_bridge_connection
from mqclipsync.certificates import load_tls_context
from mqclipsync.clipboard import ClipboardAccessError, PyperclipClipboard
from mqclipsync.clipboard_watcher import create_watcher
from mqclipsync.config import BridgeConfig
from mqclipsync.messages import OutboundMessage
from mqclipsync.sync import BridgePhase, BridgeState, handle_clipboard_change

logger = logging.getLogger(__name__)


async def run_until_shutdown(
    connection: Awaitable[None], shutdown_requested: asyncio.Event
) -> None:
    """Run connection until it fails or shutdown is requested.

    Args:
        connection: The broker connection coroutine.
        shutdown_requested: Set by the signal handlers.

    Raises:
        BrokerConnectionError: If the connection ends first.
    """
    connection_task = asyncio.ensure_future(connection)
    shutdown_task = asyncio.create_task(shutdown_requested.wait())
    try:
        done, _ = await asyncio.wait(
            {connection_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
        )
        if connection_task in done:
            connection_task.result()
        else:
            logger.info("Shutdown requested")
    finally:
        for task in (connection_task, shutdown_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(connection_task, shutdown_task, return_exceptions=True)


async def run_bridge(config: BridgeConfig) -> None:
    """Run a clipboard bridge until shutdown or connection loss.

    Loads certificates and probes the clipboard before starting anything,
    so missing material or a missing clipboard fail fast.

    Args:
        config: Bridge configuration.

    Raises:
        CertificateError: If certificate material is missing or malformed.
        ClipboardAccessError: If the clipboard or watcher cannot start, or
            the watcher thread dies.
        BrokerConnectionError: On connection failure or loss.
    """
    tls_context = load_tls_context(config)
    clipboard = PyperclipClipboard()
    clipboard.check_available()

    state = BridgeState(topic=config.topic)
    loop = asyncio.get_running_loop()
    outbound: asyncio.Queue[OutboundMessage] = asyncio.Queue()

    def enqueue(message: OutboundMessage) -> None:
        """Hand a message from the watcher thread to the publisher."""
        loop.call_soon_threadsafe(outbound.put_nowait, message)

    def on_clipboard_change() -> None:
        handle_clipboard_change(state, clipboard, enqueue)

    shutdown_requested = asyncio.Event()
    watcher_errors: list[Exception] = []

    def record_watcher_error(error: Exception) -> None:
        watcher_errors.append(error)
        shutdown_requested.set()

    def on_watcher_error(error: Exception) -> None:
        """Stop the bridge from the watcher thread once it has died."""
        loop.call_soon_threadsafe(record_watcher_error, error)

    loop.add_signal_handler(signal.SIGINT, shutdown_requested.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_requested.set)
    try:
        with create_watcher(
            clipboard, on_clipboard_change, config.poll_interval, on_error=on_watcher_error
        ):
            try:
                await run_until_shutdown(
                    run_bridge_connection(config, state, clipboard, tls_context, outbound),
                    shutdown_requested,
                )
            finally:
                state.phase = BridgePhase.SHUTTING_DOWN
    finally:
        loop.remove_signal_handler(signal.SIGINT)
        loop.remove_signal_handler(signal.SIGTERM)
    if watcher_errors:
        error = watcher_errors[0]
        raise ClipboardAccessError(f"Clipboard watcher failed: {error}") from error
    logger.info("exit")
