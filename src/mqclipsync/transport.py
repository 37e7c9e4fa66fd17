#!/usr/bin/env python3
"""MQTT transport for clipboard content.

Wraps aiomqtt for the three operations the bridge needs: connecting with
mutual TLS, subscribing to and publishing on the per-user topic, and
iterating inbound payloads.

Quality of service is deliberately asymmetric:
- Subscribe uses QoS 0 (at most once). A duplicate or lost inbound copy is
  harmless since rewriting identical clipboard content is a no-op.
- Publish uses QoS 1 (at least once). A locally authored change is worth a
  delivery guarantee.

Payloads are raw UTF-8 text with no envelope.
"""

from __future__ import annotations

import logging
import ssl
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import aiomqtt

if TYPE_CHECKING:
    from mqclipsync.config import BridgeConfig

logger = logging.getLogger(__name__)

QOS_AT_MOST_ONCE: int = 0
QOS_AT_LEAST_ONCE: int = 1

# Keep-alive interval in seconds. Short so a dead broker is noticed quickly.
KEEP_ALIVE: int = 5


class BrokerConnectionError(ConnectionError):
    """
    Exception raised when the broker connection fails or is lost.
    """

    pass


@asynccontextmanager
async def connect(
    config: BridgeConfig, tls_context: ssl.SSLContext
) -> AsyncIterator[aiomqtt.Client]:
    """Connect to the broker for the duration of the context.

    Args:
        config: Bridge configuration with broker address and device id.
        tls_context: Client TLS context from load_tls_context().

    Yields:
        A connected aiomqtt.Client.

    Raises:
        BrokerConnectionError: If the connection cannot be established.
    """
    client = aiomqtt.Client(
        config.server,
        port=config.port,
        identifier=config.device,
        keepalive=KEEP_ALIVE,
        tls_context=tls_context,
        logger=logger,
    )
    try:
        await client.__aenter__()
    except aiomqtt.MqttError as e:
        raise BrokerConnectionError(
            f"Failed to connect to {config.server}:{config.port}: {e}"
        ) from e
    logger.info("Connected to %s:%d as %s", config.server, config.port, config.device)
    try:
        yield client
    finally:
        try:
            await client.__aexit__(None, None, None)
        except aiomqtt.MqttError as e:
            logger.debug("Error while disconnecting: %s", e)


async def subscribe(client: aiomqtt.Client, topic: str) -> None:
    """Subscribe to topic at QoS 0.

    Raises:
        BrokerConnectionError: If the subscription is rejected or the
            connection fails.
    """
    try:
        await client.subscribe(topic, qos=QOS_AT_MOST_ONCE)
    except aiomqtt.MqttError as e:
        raise BrokerConnectionError(f"Failed to subscribe to {topic}: {e}") from e
    logger.info("Subscribed %s", topic)


async def publish(client: aiomqtt.Client, topic: str, content: str) -> None:
    """Publish clipboard text to topic at QoS 1.

    Raises:
        aiomqtt.MqttError: If the publish fails.
    """
    payload = content.encode("utf-8")
    await client.publish(topic, payload=payload, qos=QOS_AT_LEAST_ONCE, retain=False)
    logger.info("Published %d bytes to %s", len(payload), topic)


def payload_bytes(message: aiomqtt.Message) -> bytes | None:
    """Return the raw payload of message, or None if it is not bytes."""
    if isinstance(message.payload, (bytes, bytearray)):
        return bytes(message.payload)
    return None


async def inbound_payloads(client: aiomqtt.Client) -> AsyncIterator[bytes]:
    """Yield raw payloads of inbound messages as they arrive.

    Messages with non-binary payloads are logged and skipped. The iterator
    never ends on its own; it terminates only when the connection is lost.

    Raises:
        BrokerConnectionError: When the connection to the broker is lost.
    """
    try:
        async for message in client.messages:
            payload = payload_bytes(message)
            if payload is None:
                logger.warning(
                    "Dropping message on %s with unexpected payload type %s",
                    message.topic,
                    type(message.payload).__name__,
                )
                continue
            logger.info("Received %d bytes from %s", len(payload), message.topic)
            yield payload
    except aiomqtt.MqttError as e:
        raise BrokerConnectionError(f"Connection to broker lost: {e}") from e
