#!/usr/bin/env python3
"""Bidirectional clipboard synchronization coordination.

This module re-exports synchronization components from submodules for
convenient imports. The actual implementations are in:
- sync_state: BridgeState, BridgePhase
- sync_handlers: handle_clipboard_change, handle_incoming_payload
- sync_loop: run_sync_loop
"""

from mqclipsync.sync_handlers import handle_clipboard_change, handle_incoming_payload
from mqclipsync.sync_loop import run_sync_loop
from mqclipsync.sync_state import BridgePhase, BridgeState

__all__ = [
    "BridgePhase",
    "BridgeState",
    "handle_clipboard_change",
    "handle_incoming_payload",
    "run_sync_loop",
]
