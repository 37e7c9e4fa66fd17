"""Click parameter types for bridge options."""
import click

# Characters with a meaning in MQTT topic names.
TOPIC_RESERVED_CHARS: str = "/+#"


def _check_topic_segment(value: str) -> str | None:
    """Return an error message if value cannot be used as a topic segment.

    Args:
        value: Identifier that will appear in a topic or client id.

    Returns:
        A description of the problem, or None if value is acceptable.
    """
    if not value:
        return "must not be empty"
    reserved = sorted({c for c in value if c in TOPIC_RESERVED_CHARS})
    if reserved:
        return f"must not contain {' '.join(reserved)}"
    if "\0" in value:
        return "must not contain NUL"
    return None


class TopicSegment(click.ParamType):
    """Click type for identifiers embedded in MQTT topics and file names."""

    name = "identifier"

    def convert(self, value, param, ctx):
        """Reject values that would produce a malformed topic."""
        problem = _check_topic_segment(value)
        if problem is not None:
            self.fail(f"{value!r} {problem}", param, ctx)
        return value
