"""CLI handling for mqclipsync.

This module provides the command-line interface for mqclipsync, handling
argument parsing via click, logging configuration, and running the bridge.
Every option can also be set through an MQCLIPSYNC_* environment variable.

Usage:
    mqclipsync --device ID --user ID --cert-dir DIR --server HOST
               [--port PORT] [--poll-interval SECONDS] [--reconnect] [--verbose]
"""

import click
import sys
from pathlib import Path

from mqclipsync.config import DEFAULT_PORT, BridgeConfig
from mqclipsync.clipboard_watcher import DEFAULT_POLL_INTERVAL
from mqclipsync.main_logging import configure_logging
from mqclipsync.main_options import TopicSegment


@click.command()
@click.option(
    "--device",
    "-d",
    required=True,
    type=TopicSegment(),
    envvar="MQCLIPSYNC_DEVICE",
    help="Device identifier, used as the MQTT client id",
)
@click.option(
    "--user",
    "-u",
    required=True,
    type=TopicSegment(),
    envvar="MQCLIPSYNC_USER",
    help="User identifier, selects the clipboard/<user> topic",
)
@click.option(
    "--cert-dir",
    "-c",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    envvar="MQCLIPSYNC_CERT_DIR",
    help="Directory holding ca.crt and <user>-<device>.crt/.key",
)
@click.option(
    "--server",
    "-s",
    required=True,
    envvar="MQCLIPSYNC_SERVER",
    help="Broker host name",
)
@click.option(
    "--port",
    "-p",
    default=DEFAULT_PORT,
    show_default=True,
    type=click.IntRange(1, 65535),
    envvar="MQCLIPSYNC_PORT",
    help="Broker port",
)
@click.option(
    "--poll-interval",
    default=DEFAULT_POLL_INTERVAL,
    show_default=True,
    type=click.FloatRange(min=0.05),
    envvar="MQCLIPSYNC_POLL_INTERVAL",
    help="Seconds between clipboard reads when X11 events are unavailable",
)
@click.option(
    "--reconnect",
    is_flag=True,
    envvar="MQCLIPSYNC_RECONNECT",
    help="Reconnect with backoff instead of exiting when the broker is lost",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable DEBUG-level logging",
)
def main(
    device: str,
    user: str,
    cert_dir: Path,
    server: str,
    port: int,
    poll_interval: float,
    reconnect: bool,
    verbose: bool,
) -> None:
    """Synchronize clipboard text between devices through an MQTT broker."""
    configure_logging(verbose)

    config = BridgeConfig(
        device=device,
        user=user,
        cert_dir=cert_dir,
        server=server,
        port=port,
        poll_interval=poll_interval,
        reconnect=reconnect,
    )
    _run_bridge(config)


def _run_bridge(config: BridgeConfig) -> None:
    """Run the bridge, reporting fatal errors with exit code 1.

    Args:
        config: Bridge configuration.
    """
    import asyncio
    from mqclipsync.bridge import run_bridge
    from mqclipsync.certificates import CertificateError
    from mqclipsync.clipboard import ClipboardAccessError

    try:
        asyncio.run(run_bridge(config))
    except (CertificateError, ClipboardAccessError, ConnectionError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
