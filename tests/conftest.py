#!/usr/bin/env python3
"""Pytest fixtures for mqclipsync tests.

Provides an in-memory clipboard, bridge state in the RUNNING phase, a
recording outbound sink and a populated certificate directory.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from mqclipsync.clipboard import ClipboardAccessError
from mqclipsync.config import BridgeConfig
from mqclipsync.messages import OutboundMessage
from mqclipsync.sync_state import BridgePhase, BridgeState


def has_display() -> bool:
    """Return True if an X11 display is configured for integration tests."""
    return bool(os.environ.get("DISPLAY"))


class FakeClipboard:
    """In-memory ClipboardAccess.

    on_write, if set, is called after every successful write with the new
    text, the way the platform fires a change notification for it.
    """

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.writes: list[str] = []
        self.fail_reads = False
        self.fail_writes = False
        self.on_write: Callable[[str], None] | None = None

    def read(self) -> str:
        if self.fail_reads:
            raise ClipboardAccessError("clipboard busy")
        return self.text

    def write(self, text: str) -> None:
        if self.fail_writes:
            raise ClipboardAccessError("clipboard busy")
        self.text = text
        self.writes.append(text)
        if self.on_write is not None:
            self.on_write(text)


class OutboundRecorder:
    """Callable sink collecting enqueued OutboundMessages in order."""

    def __init__(self) -> None:
        self.messages: list[OutboundMessage] = []

    def __call__(self, message: OutboundMessage) -> None:
        self.messages.append(message)

    @property
    def contents(self) -> list[str]:
        return [m.content for m in self.messages]


@pytest.fixture
def clipboard() -> FakeClipboard:
    """Create an empty in-memory clipboard."""
    return FakeClipboard()


@pytest.fixture
def bridge_state() -> BridgeState:
    """Create a RUNNING BridgeState for user alice."""
    return BridgeState(topic="clipboard/alice", phase=BridgePhase.RUNNING)


@pytest.fixture
def outbound() -> OutboundRecorder:
    """Create a recording outbound sink."""
    return OutboundRecorder()


@pytest.fixture
def cert_dir(tmp_path: Path) -> Path:
    """Provide a certificate directory with placeholder files for alice/phone1."""
    for name in ("ca.crt", "alice-phone1.crt", "alice-phone1.key"):
        (tmp_path / name).write_text("placeholder\n")
    return tmp_path


@pytest.fixture
def bridge_config(cert_dir: Path) -> BridgeConfig:
    """Create a BridgeConfig for alice/phone1 pointing at cert_dir."""
    return BridgeConfig(
        device="phone1",
        user="alice",
        cert_dir=cert_dir,
        server="broker.example.net",
    )
