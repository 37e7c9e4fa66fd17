"""X11 clipboard change notification via the XFixes extension.

XFixes delivers a SetSelectionOwnerNotify event whenever a client takes
ownership of the CLIPBOARD selection, which is what every copy (including
the bridge's own writes through xclip/xsel) does. This gives event-driven
change notification without polling clipboard content.

The module handles:
- Opening the X11 display
- Creating a hidden window to receive selection events
- Registering for XFixes selection owner notifications
- Running a watcher thread that invokes a callback per notification
"""

from __future__ import annotations

import logging
import os
import select
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from mqclipsync.clipboard import ClipboardAccessError

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.xobject.drawable import Window

logger = logging.getLogger(__name__)

# Seconds the watcher thread blocks on the display socket before checking
# whether stop() was requested.
STOP_CHECK_INTERVAL: float = 0.2


def open_display(display_name: str | None = None) -> Display:
    """Open the X11 display named by display_name or $DISPLAY.

    Args:
        display_name: Display to open, defaults to the DISPLAY variable.

    Returns:
        Display object for X11 operations.

    Raises:
        ClipboardAccessError: If DISPLAY is unset or the connection fails.
    """
    display_name = display_name or os.environ.get("DISPLAY")
    if not display_name:
        raise ClipboardAccessError("DISPLAY environment variable is not set")

    try:
        from Xlib.display import Display as XDisplay
        return XDisplay(display_name)
    except Exception as e:
        raise ClipboardAccessError(
            f"Failed to connect to X11 display {display_name}: {e}"
        ) from e


def create_hidden_window(display: Display) -> Window:
    """Create a 1x1 unmapped window to receive selection events.

    Args:
        display: The X11 display connection.

    Returns:
        A Window object registered for nothing but XFixes events.
    """
    screen = display.screen()
    return screen.root.create_window(0, 0, 1, 1, 0, screen.root_depth)


def register_xfixes_events(display: Display, window: Window) -> None:
    """Register for CLIPBOARD owner change notifications.

    Args:
        display: The X11 display connection.
        window: The window to receive selection events.

    Raises:
        ClipboardAccessError: If the XFixes extension is missing.
    """
    from Xlib.ext import xfixes

    if not display.has_extension("XFIXES"):
        raise ClipboardAccessError("X server does not support the XFIXES extension")

    xfixes.query_version(display)
    clipboard_atom = display.intern_atom("CLIPBOARD")
    mask = xfixes.XFixesSetSelectionOwnerNotifyMask
    xfixes.select_selection_input(display, window.id, clipboard_atom, mask)
    display.flush()


class XFixesWatcher:
    """Invoke a callback on every CLIPBOARD ownership change.

    The display is opened in start() so initialization failures surface in
    the caller. Events are then read exclusively by the watcher thread. If
    the thread fails (the X connection drops, or on_change raises) the error
    is logged, handed to on_error and the thread exits.
    """

    def __init__(
        self,
        on_change: Callable[[], None],
        display_name: str | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._on_change = on_change
        self._on_error = on_error
        self._failed = False
        self._display_name = display_name
        self._display: Display | None = None
        self._window: Window | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Open the display, register for events and start the thread.

        Raises:
            ClipboardAccessError: If X11 or XFixes is unavailable.
        """
        display = open_display(self._display_name)
        try:
            window = create_hidden_window(display)
            register_xfixes_events(display, window)
        except BaseException:
            display.close()
            raise
        self._display = display
        self._window = window
        self._stop.clear()
        self._failed = False
        self._thread = threading.Thread(
            target=self._run, name="xfixes-watcher", daemon=True
        )
        self._thread.start()
        logger.debug("XFixes clipboard watcher started")

    def process_pending_events(self) -> int:
        """Dispatch events already queued on the display without blocking.

        Returns:
            Number of owner change notifications dispatched.
        """
        assert self._display is not None
        notified = 0
        while self._display.pending_events():
            event = self._display.next_event()
            if type(event).__name__ == "SetSelectionOwnerNotify":
                notified += 1
                self._on_change()
        return notified

    def _run(self) -> None:
        assert self._display is not None
        try:
            fd = self._display.fileno()
            while not self._stop.is_set():
                readable, _, _ = select.select([fd], [], [], STOP_CHECK_INTERVAL)
                if readable:
                    self.process_pending_events()
        except Exception as e:
            self._failed = True
            logger.exception(
                "Clipboard watcher on display %s failed",
                self._display.get_display_name(),
            )
            if self._on_error is not None:
                self._on_error(e)

    def stop(self) -> None:
        """Stop the watcher thread and release the display."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._display is not None:
            if self._failed:
                # The connection may be broken, drop it without a round-trip.
                self._window = None
                self._display = None
                return
            if self._window is not None:
                self._window.destroy()
                self._window = None
            self._display.close()
            self._display = None
            logger.debug("XFixes clipboard watcher stopped")

    def __enter__(self) -> XFixesWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
