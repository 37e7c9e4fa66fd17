"""Local clipboard text access.

This module wraps pyperclip, which picks a platform mechanism (xclip/xsel or
wl-clipboard on Linux, pbcopy/pbpaste on macOS, the Win32 API on Windows) on
first use. Only text is supported; pyperclip reports non-text content as an
empty string.

The module handles:
- Probing that a clipboard mechanism exists at startup
- Reading and writing clipboard text
- Mapping pyperclip failures to ClipboardAccessError
"""

from __future__ import annotations

from typing import Protocol

import pyperclip


class ClipboardAccessError(Exception):
    """
    Exception raised when the clipboard cannot be read or written.

    Fatal during startup (no clipboard mechanism available); recoverable
    for individual reads and writes once the bridge is running.
    """

    pass


class ClipboardAccess(Protocol):
    """Text clipboard operations consumed by the synchronization handlers."""

    def read(self) -> str:
        ...

    def write(self, text: str) -> None:
        ...


class PyperclipClipboard:
    """ClipboardAccess implementation backed by pyperclip."""

    def check_available(self) -> None:
        """Fail fast if no clipboard mechanism is usable.

        Raises:
            ClipboardAccessError: If pyperclip cannot find a mechanism or
                the startup read fails.
        """
        try:
            pyperclip.paste()
        except pyperclip.PyperclipException as e:
            raise ClipboardAccessError(f"Clipboard is not available: {e}") from e

    def read(self) -> str:
        """Return the current clipboard text.

        Returns:
            Clipboard text, or an empty string if it holds no text.

        Raises:
            ClipboardAccessError: If the clipboard is inaccessible.
        """
        try:
            return pyperclip.paste()
        except pyperclip.PyperclipException as e:
            raise ClipboardAccessError(f"Failed to read clipboard: {e}") from e

    def write(self, text: str) -> None:
        """Replace the clipboard contents with text.

        Raises:
            ClipboardAccessError: If the clipboard is inaccessible.
        """
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardAccessError(f"Failed to write clipboard: {e}") from e
