#!/usr/bin/env python3
"""Broker session and optional reconnect logic.

A session connects to the broker, subscribes to the user topic and runs the
sync loop until the connection is lost. By default a lost connection ends
the process. With reconnect enabled the session is retried with
exponential backoff using tenacity.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import TYPE_CHECKING

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_never,
    wait_exponential,
)

from mqclipsync.sync import BridgePhase, BridgeState, run_sync_loop
from mqclipsync.transport import BrokerConnectionError, connect, subscribe

if TYPE_CHECKING:
    from mqclipsync.clipboard import ClipboardAccess
    from mqclipsync.config import BridgeConfig
    from mqclipsync.messages import OutboundMessage

logger = logging.getLogger(__name__)

# Backoff between broker sessions with --reconnect: the first retry waits
# RECONNECT_MIN_WAIT seconds and each further one doubles, up to
# RECONNECT_MAX_WAIT.
RECONNECT_MIN_WAIT: float = 1.0
RECONNECT_MAX_WAIT: float = 60.0
RECONNECT_BACKOFF: float = 2.0


async def run_session(
    config: BridgeConfig,
    state: BridgeState,
    clipboard: ClipboardAccess,
    tls_context: ssl.SSLContext,
    outbound: asyncio.Queue[OutboundMessage],
) -> None:
    """Connect, subscribe and synchronize until the connection is lost.

    The bridge enters RUNNING once subscribed and falls back to IDLE when
    the session ends, so clipboard changes made while disconnected are not
    queued.

    Raises:
        BrokerConnectionError: On connection failure or loss.
    """
    logger.debug("Connecting to %s:%d", config.server, config.port)
    async with connect(config, tls_context) as client:
        await subscribe(client, state.topic)
        state.phase = BridgePhase.RUNNING
        try:
            await run_sync_loop(state, client, clipboard, outbound)
        finally:
            if state.phase is BridgePhase.RUNNING:
                state.phase = BridgePhase.IDLE


@retry(
    wait=wait_exponential(
        multiplier=RECONNECT_MIN_WAIT,
        exp_base=RECONNECT_BACKOFF,
        min=RECONNECT_MIN_WAIT,
        max=RECONNECT_MAX_WAIT,
    ),
    retry=retry_if_exception_type(BrokerConnectionError),
    stop=stop_never,
    before_sleep=before_sleep_log(logger, logging.WARNING),
)
async def run_session_with_retry(
    config: BridgeConfig,
    state: BridgeState,
    clipboard: ClipboardAccess,
    tls_context: ssl.SSLContext,
    outbound: asyncio.Queue[OutboundMessage],
) -> None:
    """Run sessions forever, reconnecting with backoff on connection loss.

    The snapshot is kept across reconnects.

    Note:
        This function never returns normally - it either runs until
        cancelled or raises an exception that doesn't trigger retry.
    """
    await run_session(config, state, clipboard, tls_context, outbound)


async def run_bridge_connection(
    config: BridgeConfig,
    state: BridgeState,
    clipboard: ClipboardAccess,
    tls_context: ssl.SSLContext,
    outbound: asyncio.Queue[OutboundMessage],
) -> None:
    """Run one session, or retrying sessions if config.reconnect is set.

    Raises:
        BrokerConnectionError: On connection loss without reconnect.
    """
    if config.reconnect:
        await run_session_with_retry(config, state, clipboard, tls_context, outbound)
    else:
        await run_session(config, state, clipboard, tls_context, outbound)
