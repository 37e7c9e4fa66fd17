#!/usr/bin/env python3
"""Clipboard content records passed between the watcher, queue and broker."""
from dataclasses import dataclass


@dataclass
class ClipboardSnapshot:
    """
    Last clipboard text known to the bridge.

    Created empty at startup and never persisted, so the first real
    clipboard content after a restart is always treated as new.

    Attributes:
        text: The last content seen locally or applied from the broker.
    """

    text: str = ""


@dataclass(frozen=True)
class OutboundMessage:
    """A detected local change waiting to be published."""

    content: str


@dataclass(frozen=True)
class InboundMessage:
    """A raw payload delivered by the broker, not yet decoded."""

    content: bytes

    def decode(self) -> str | None:
        """
        Decode the payload as UTF-8.

        Returns:
            The decoded text, or None if the payload is not valid UTF-8.
        """
        try:
            return self.content.decode("utf-8")
        except UnicodeDecodeError:
            return None
