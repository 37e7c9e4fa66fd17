#!/usr/bin/env python3
"""TLS context construction for mutual authentication with the broker.

The broker is verified against ca.crt from the certificate directory and
the client presents {user}-{device}.crt with its private key. Any problem
with this material is fatal at startup.
"""

from __future__ import annotations

import logging
import ssl
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mqclipsync.config import BridgeConfig

logger = logging.getLogger(__name__)


class CertificateError(Exception):
    """
    Exception raised when certificate material is missing or malformed.
    """

    pass


def load_tls_context(config: BridgeConfig) -> ssl.SSLContext:
    """
    Build a client TLS context from the configured certificate directory.

    Args:
        config: Bridge configuration naming the certificate files.

    Returns:
        An SSLContext that verifies the broker and presents the client
        certificate.

    Raises:
        CertificateError: If a file is missing, unreadable or malformed.
    """
    for path in (config.ca_cert_path, config.client_cert_path, config.client_key_path):
        if not path.is_file():
            raise CertificateError(f"Certificate file not found: {path}")

    try:
        context = ssl.create_default_context(
            ssl.Purpose.SERVER_AUTH, cafile=str(config.ca_cert_path)
        )
    except (OSError, ssl.SSLError) as e:
        raise CertificateError(
            f"Failed to load CA certificate {config.ca_cert_path}: {e}"
        ) from e

    try:
        context.load_cert_chain(
            certfile=str(config.client_cert_path),
            keyfile=str(config.client_key_path),
        )
    except (OSError, ssl.SSLError) as e:
        raise CertificateError(
            f"Failed to load client certificate {config.client_cert_path}: {e}"
        ) from e

    logger.debug("Loaded TLS material from %s", config.cert_dir)
    return context
