#!/usr/bin/env python3
"""Clipboard synchronization state.

This module provides the BridgeState dataclass that groups the state shared
between the watcher thread and the asyncio tasks of a running bridge.
"""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field

from mqclipsync.messages import ClipboardSnapshot, OutboundMessage


class BridgePhase(enum.Enum):
    """Lifecycle of a bridge: IDLE -> RUNNING -> SHUTTING_DOWN."""

    IDLE = "idle"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


@dataclass
class BridgeState:
    """State for clipboard synchronization.

    The snapshot is touched from two contexts: the watcher thread (outbound
    rule) and the inbound worker (inbound rule). Every read-compare-update
    or write-update sequence on it must hold ``lock``.

    Attributes:
        topic: Broker topic used for both subscribe and publish.
        snapshot: Last clipboard text known to the bridge.
        phase: Current lifecycle phase.
        lock: Guards snapshot across the watcher and inbound contexts.
        pending: Message whose publish failed, sent first by the next publisher.
        publisher_stopped: True while no publisher is draining the queue;
            the outbound rule leaves changes undetected meanwhile.
    """

    topic: str
    snapshot: ClipboardSnapshot = field(default_factory=ClipboardSnapshot)
    phase: BridgePhase = BridgePhase.IDLE
    lock: threading.Lock = field(default_factory=threading.Lock)
    pending: OutboundMessage | None = None
    publisher_stopped: bool = False

    @property
    def running(self) -> bool:
        """True while the bridge is in the RUNNING phase."""
        return self.phase is BridgePhase.RUNNING
