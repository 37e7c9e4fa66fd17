"""Logging configuration for the mqclipsync CLI."""
import logging

# The bridge runs for days, so every record carries a timestamp.
LOG_FORMAT: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity setting.

    Args:
        verbose: If True, log DEBUG and above from every module; otherwise
            INFO from mqclipsync (publish/receive byte counts, topic) and
            WARNING from libraries.

    Records go to stderr.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
    if not verbose:
        logging.getLogger("mqclipsync").setLevel(logging.INFO)
