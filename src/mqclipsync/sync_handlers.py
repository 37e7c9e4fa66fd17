#!/usr/bin/env python3
"""Clipboard synchronization event handlers.

This module provides the two state transitions of a running bridge:
- handle_clipboard_change: outbound rule, run by the watcher thread
- handle_incoming_payload: inbound rule, run for each broker message

Both hold state.lock for their whole sequence. The inbound rule updates the
snapshot before releasing the lock, so the change notification caused by its
own clipboard write is evaluated against the new content and is not
published back to the broker.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from mqclipsync.clipboard import ClipboardAccessError
from mqclipsync.dedup import should_forward
from mqclipsync.messages import InboundMessage, OutboundMessage

if TYPE_CHECKING:
    from mqclipsync.clipboard import ClipboardAccess
    from mqclipsync.sync_state import BridgeState

logger = logging.getLogger(__name__)


def handle_clipboard_change(
    state: BridgeState,
    clipboard: ClipboardAccess,
    enqueue: Callable[[OutboundMessage], None],
) -> bool:
    """Handle a local clipboard change notification.

    Reads the clipboard, compares it with the snapshot and enqueues the
    content for publishing if it is new. Unreadable or empty clipboards are
    treated as holding no text. While the publisher is stopped nothing is
    queued and the snapshot is left alone, so the change is still detected
    once a publisher runs again.

    Args:
        state: The shared bridge state.
        clipboard: Clipboard to read.
        enqueue: Hands an OutboundMessage to the publisher, in order.

    Returns:
        True if a message was enqueued.
    """
    if not state.running:
        logger.debug("Bridge not running, ignoring clipboard change")
        return False

    with state.lock:
        try:
            text = clipboard.read()
        except ClipboardAccessError as e:
            logger.debug("No clipboard text available: %s", e)
            return False

        if not text:
            logger.debug("Clipboard read returned no text, skipping")
            return False

        if not should_forward(text, state.snapshot.text):
            logger.debug("Skipping unchanged or echoed content")
            return False

        if state.publisher_stopped:
            logger.warning(
                "Publisher for %s is stopped, not queueing %d characters",
                state.topic,
                len(text),
            )
            return False

        state.snapshot.text = text
        enqueue(OutboundMessage(text))

    logger.debug("Queued %d characters for %s", len(text), state.topic)
    return True


def handle_incoming_payload(
    state: BridgeState,
    clipboard: ClipboardAccess,
    payload: bytes,
) -> bool:
    """Apply a broker payload to the local clipboard.

    Payloads that are not valid UTF-8 are dropped. The snapshot is updated
    only after a successful write and before the lock is released.

    Args:
        state: The shared bridge state.
        clipboard: Clipboard to write.
        payload: Raw message payload.

    Returns:
        True if the clipboard was written.
    """
    if not state.running:
        logger.debug("Bridge not running, ignoring %d bytes", len(payload))
        return False

    content = InboundMessage(payload).decode()
    if content is None:
        logger.warning(
            "Dropping %d bytes from %s: not valid UTF-8", len(payload), state.topic
        )
        return False

    with state.lock:
        try:
            clipboard.write(content)
        except ClipboardAccessError as e:
            logger.error("Failed to set clipboard content: %s", e)
            return False
        state.snapshot.text = content

    logger.debug("Set clipboard from %d bytes received on %s", len(payload), state.topic)
    return True
