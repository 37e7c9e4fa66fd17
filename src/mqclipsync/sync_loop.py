#!/usr/bin/env python3
"""Broker-side synchronization loop.

This module provides run_sync_loop, which runs the publish and inbound
contexts of a connected bridge as two asyncio tasks:
- the publisher drains the outbound queue in order and publishes each
  message; a failed publish stops it and keeps the message for the next
  session
- the inbound task applies each broker payload to the clipboard; losing
  the connection ends the loop
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import TYPE_CHECKING

import aiomqtt

from mqclipsync.sync_handlers import handle_incoming_payload
from mqclipsync.transport import BrokerConnectionError, inbound_payloads, publish

if TYPE_CHECKING:
    from mqclipsync.clipboard import ClipboardAccess
    from mqclipsync.messages import OutboundMessage
    from mqclipsync.sync_state import BridgeState

logger = logging.getLogger(__name__)


async def run_publisher(
    state: BridgeState,
    client: aiomqtt.Client,
    outbound: asyncio.Queue[OutboundMessage],
) -> None:
    """Publish queued messages one at a time, in detection order.

    The message being published is held in state.pending until the broker
    accepts it, so a publisher that fails or is cancelled leaves it for the
    next one, which sends it before reading the queue. Returns when a
    publish fails, with state.publisher_stopped set until the next
    publisher starts.

    Args:
        state: The shared bridge state.
        client: The connected MQTT client.
        outbound: Queue filled by the outbound rule.
    """
    state.publisher_stopped = False
    while True:
        if state.pending is None:
            state.pending = await outbound.get()
            outbound.task_done()
        else:
            logger.info("Retrying publish of an earlier change to %s", state.topic)
        message = state.pending
        try:
            await publish(client, state.topic, message.content)
        except aiomqtt.MqttError as e:
            logger.error(
                "Failed to publish %d bytes to %s: %s",
                len(message.content.encode("utf-8")),
                state.topic,
                e,
            )
            state.publisher_stopped = True
            return
        state.pending = None


async def run_inbound(
    state: BridgeState,
    client: aiomqtt.Client,
    clipboard: ClipboardAccess,
) -> None:
    """Apply inbound payloads to the clipboard sequentially.

    The inbound rule blocks on state.lock and on the clipboard write, so it
    runs in a worker thread to keep the event loop responsive.

    Raises:
        BrokerConnectionError: When the connection to the broker is lost.
    """
    async for payload in inbound_payloads(client):
        await asyncio.to_thread(handle_incoming_payload, state, clipboard, payload)


async def run_sync_loop(
    state: BridgeState,
    client: aiomqtt.Client,
    clipboard: ClipboardAccess,
    outbound: asyncio.Queue[OutboundMessage],
) -> None:
    """Run the publish and inbound contexts until the connection is lost.

    A stopped publisher is logged and the inbound context keeps running.

    Args:
        state: The shared bridge state.
        client: The connected MQTT client.
        clipboard: Clipboard written by the inbound rule.
        outbound: Queue filled by the outbound rule.

    Raises:
        BrokerConnectionError: When the inbound stream ends.
    """
    publisher_task = asyncio.create_task(run_publisher(state, client, outbound))
    inbound_task = asyncio.create_task(run_inbound(state, client, clipboard))
    try:
        done, _ = await asyncio.wait(
            {publisher_task, inbound_task}, return_when=asyncio.FIRST_COMPLETED
        )
        if inbound_task not in done:
            publisher_task.result()
            logger.error(
                "Publisher stopped, local changes will no longer be sent to %s",
                state.topic,
            )
        await inbound_task
    finally:
        for task in (publisher_task, inbound_task):
            if not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
    raise BrokerConnectionError(f"Inbound message stream for {state.topic} ended")
