#!/usr/bin/env python3
"""Bridge configuration.

Groups the startup settings supplied on the command line and derives the
broker topic and certificate paths from them.
"""
from dataclasses import dataclass
from pathlib import Path

from mqclipsync.clipboard_watcher import DEFAULT_POLL_INTERVAL

# Default MQTT over TLS port.
DEFAULT_PORT: int = 8883

# Prefix of the per-user topic shared by all of a user's devices.
TOPIC_PREFIX: str = "clipboard/"

# File name of the broker CA certificate inside the certificate directory.
CA_CERT_NAME: str = "ca.crt"


def topic_for_user(user: str) -> str:
    """Return the broker topic shared by every device of user."""
    return f"{TOPIC_PREFIX}{user}"


@dataclass(frozen=True)
class BridgeConfig:
    """
    Startup settings for one bridge instance.

    Attributes:
        device: Device identifier, used as the MQTT client identifier.
        user: User identifier, selects the shared topic.
        cert_dir: Directory holding ca.crt and the client key pair.
        server: Broker host name.
        port: Broker port.
        poll_interval: Seconds between reads for the polling watcher.
        reconnect: Reconnect with backoff instead of exiting on connection loss.
    """

    device: str
    user: str
    cert_dir: Path
    server: str
    port: int = DEFAULT_PORT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    reconnect: bool = False

    @property
    def topic(self) -> str:
        return topic_for_user(self.user)

    @property
    def ca_cert_path(self) -> Path:
        return self.cert_dir / CA_CERT_NAME

    @property
    def client_cert_path(self) -> Path:
        return self.cert_dir / f"{self.user}-{self.device}.crt"

    @property
    def client_key_path(self) -> Path:
        return self.cert_dir / f"{self.user}-{self.device}.key"
