"""Clipboard change watchers.

A watcher invokes a zero-argument callback whenever the clipboard changes,
whoever changed it. The bridge's own writes trigger notifications too; it is
up to the callback to tell them apart.

Two implementations exist:
- XFixesWatcher (clipboard_x11): event-driven, used when DISPLAY is set.
- PollingWatcher: re-reads clipboard text on a fixed interval, used on
  platforms without X11.

Both are scoped resources: use them as context managers so the watcher
thread is stopped on every exit path.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable

from mqclipsync.clipboard import ClipboardAccess, ClipboardAccessError
from mqclipsync.clipboard_x11 import XFixesWatcher

logger = logging.getLogger(__name__)

# Default seconds between clipboard reads for the polling watcher.
DEFAULT_POLL_INTERVAL: float = 0.5


class PollingWatcher:
    """Invoke a callback when polled clipboard text differs from the last poll.

    If on_change raises, the error is logged, handed to on_error and the
    polling thread exits.
    """

    def __init__(
        self,
        clipboard: ClipboardAccess,
        on_change: Callable[[], None],
        interval: float = DEFAULT_POLL_INTERVAL,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._clipboard = clipboard
        self._on_change = on_change
        self._on_error = on_error
        self._interval = interval
        self._last_polled: str | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _read(self) -> str | None:
        try:
            return self._clipboard.read()
        except ClipboardAccessError as e:
            logger.debug("Clipboard poll failed: %s", e)
            return None

    def poll_once(self) -> bool:
        """Read the clipboard once and notify if it changed.

        The first successful read only establishes the baseline, so content
        already on the clipboard at startup is not reported as a change.

        Returns:
            True if the callback was invoked.
        """
        current = self._read()
        if current is None or current == self._last_polled:
            return False
        baseline = self._last_polled is None
        self._last_polled = current
        if baseline:
            return False
        self._on_change()
        return True

    def _run(self) -> None:
        try:
            while not self._stop.wait(self._interval):
                self.poll_once()
        except Exception as e:
            logger.exception("Clipboard poller failed")
            if self._on_error is not None:
                self._on_error(e)

    def start(self) -> None:
        """Record the current clipboard as baseline and start polling."""
        self._stop.clear()
        self._last_polled = None
        self.poll_once()
        self._thread = threading.Thread(
            target=self._run, name="clipboard-poller", daemon=True
        )
        self._thread.start()
        logger.debug("Polling clipboard every %.2fs", self._interval)

    def stop(self) -> None:
        """Stop polling and wait for the thread to exit."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
            logger.debug("Clipboard poller stopped")

    def __enter__(self) -> PollingWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def create_watcher(
    clipboard: ClipboardAccess,
    on_change: Callable[[], None],
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    on_error: Callable[[Exception], None] | None = None,
) -> XFixesWatcher | PollingWatcher:
    """Pick a watcher for the current platform.

    Args:
        clipboard: Clipboard used by the polling watcher.
        on_change: Callback invoked on each clipboard change.
        poll_interval: Seconds between polls when polling is used.
        on_error: Called from the watcher thread if it fails.

    Returns:
        An XFixesWatcher if an X11 display is configured, otherwise a
        PollingWatcher. The watcher is not started.
    """
    if os.environ.get("DISPLAY") and not os.environ.get("WAYLAND_DISPLAY"):
        return XFixesWatcher(on_change, on_error=on_error)
    return PollingWatcher(clipboard, on_change, poll_interval, on_error=on_error)
