#!/usr/bin/env python3
"""Tests for BridgeConfig derived values."""
from pathlib import Path

from mqclipsync.config import DEFAULT_PORT, BridgeConfig, topic_for_user


def test_topic_for_user() -> None:
    """Test the topic is derived from the user only."""
    assert topic_for_user("alice") == "clipboard/alice"


def test_config_defaults() -> None:
    """Test port, poll interval and reconnect defaults."""
    config = BridgeConfig(device="d", user="u", cert_dir=Path("/c"), server="s")
    assert config.port == DEFAULT_PORT == 8883
    assert config.poll_interval == 0.5
    assert config.reconnect is False


def test_topic_shared_across_devices() -> None:
    """Test two devices of the same user use the same topic."""
    phone = BridgeConfig(device="phone1", user="alice", cert_dir=Path("/c"), server="s")
    laptop = BridgeConfig(device="laptop", user="alice", cert_dir=Path("/c"), server="s")
    assert phone.topic == laptop.topic == "clipboard/alice"


def test_certificate_paths(bridge_config: BridgeConfig, cert_dir: Path) -> None:
    """Test certificate file names follow ca.crt and <user>-<device>.crt/.key."""
    assert bridge_config.ca_cert_path == cert_dir / "ca.crt"
    assert bridge_config.client_cert_path == cert_dir / "alice-phone1.crt"
    assert bridge_config.client_key_path == cert_dir / "alice-phone1.key"
