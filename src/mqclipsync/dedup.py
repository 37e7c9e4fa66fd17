#!/usr/bin/env python3
"""
Change detection for outbound clipboard content.

When clipboard content is set from a received message, the watcher fires a
change notification exactly as it would for a user copy. The bridge keeps a
snapshot of the last content it knows about and only forwards reads that
differ from it.

Comparison is exact: no whitespace or encoding normalization is applied, so
"abc" and "abc\\n" are distinct changes.
"""


def should_forward(observed: str, last_seen: str) -> bool:
    """
    Decide whether an observed clipboard read is a new local change.

    Args:
        observed: Text currently held by the clipboard.
        last_seen: Text recorded in the bridge snapshot.

    Returns:
        True if observed differs from last_seen, False otherwise.
    """
    return observed != last_seen
