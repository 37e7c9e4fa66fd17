#!/usr/bin/env python3
"""Tests for the publish and inbound contexts in sync_loop."""
import asyncio
from contextlib import suppress

import aiomqtt
import pytest

from conftest import FakeClipboard
from fake_broker import FakeMqttClient, wait_for
from mqclipsync.messages import OutboundMessage
from mqclipsync.sync_state import BridgeState
from mqclipsync.transport import QOS_AT_LEAST_ONCE, BrokerConnectionError


@pytest.mark.asyncio
async def test_run_publisher_preserves_order(bridge_state: BridgeState) -> None:
    """Test messages are published in the order they were queued."""
    from mqclipsync.sync_loop import run_publisher

    client = FakeMqttClient()
    queue: asyncio.Queue = asyncio.Queue()
    for text in ("first", "second", "third"):
        queue.put_nowait(OutboundMessage(text))

    task = asyncio.create_task(run_publisher(bridge_state, client, queue))
    await wait_for(lambda: len(client.published) == 3)
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task

    assert client.published == [
        ("clipboard/alice", b"first", QOS_AT_LEAST_ONCE),
        ("clipboard/alice", b"second", QOS_AT_LEAST_ONCE),
        ("clipboard/alice", b"third", QOS_AT_LEAST_ONCE),
    ]


@pytest.mark.asyncio
async def test_run_publisher_stops_on_publish_failure(bridge_state: BridgeState) -> None:
    """Test a failed publish ends the publisher and keeps the failed message."""
    from mqclipsync.sync_loop import run_publisher

    client = FakeMqttClient()
    client.publish_error = aiomqtt.MqttError("not connected")
    queue: asyncio.Queue = asyncio.Queue()
    queue.put_nowait(OutboundMessage("lost"))
    queue.put_nowait(OutboundMessage("kept"))

    await asyncio.wait_for(run_publisher(bridge_state, client, queue), timeout=2)

    assert client.published == []
    assert queue.qsize() == 1
    assert bridge_state.pending == OutboundMessage("lost")
    assert bridge_state.publisher_stopped


@pytest.mark.asyncio
async def test_failed_message_is_published_by_next_session(
    bridge_state: BridgeState,
) -> None:
    """Test a change whose publish failed is sent first after reconnecting."""
    from mqclipsync.sync_loop import run_publisher

    broken = FakeMqttClient()
    broken.publish_error = aiomqtt.MqttError("connection lost")
    queue: asyncio.Queue = asyncio.Queue()
    queue.put_nowait(OutboundMessage("X"))
    await asyncio.wait_for(run_publisher(bridge_state, broken, queue), timeout=2)
    queue.put_nowait(OutboundMessage("Y"))

    healthy = FakeMqttClient()
    task = asyncio.create_task(run_publisher(bridge_state, healthy, queue))
    await wait_for(lambda: len(healthy.published) == 2)
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task

    assert [payload for _topic, payload, _qos in healthy.published] == [b"X", b"Y"]
    assert bridge_state.pending is None
    assert not bridge_state.publisher_stopped


@pytest.mark.asyncio
async def test_cancelled_publish_is_kept(bridge_state: BridgeState) -> None:
    """Test a publish interrupted by cancellation stays pending."""
    from mqclipsync.sync_loop import run_publisher

    client = FakeMqttClient()
    started = asyncio.Event()

    async def hang(*args: object, **kwargs: object) -> None:
        started.set()
        await asyncio.Event().wait()

    client.publish = hang
    queue: asyncio.Queue = asyncio.Queue()
    queue.put_nowait(OutboundMessage("in flight"))
    task = asyncio.create_task(run_publisher(bridge_state, client, queue))
    await asyncio.wait_for(started.wait(), timeout=2)
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task

    assert bridge_state.pending == OutboundMessage("in flight")


@pytest.mark.asyncio
async def test_run_sync_loop_raises_on_connection_loss(
    bridge_state: BridgeState, clipboard: FakeClipboard
) -> None:
    """Test losing the broker ends the loop with BrokerConnectionError."""
    from mqclipsync.sync_loop import run_sync_loop

    client = FakeMqttClient()
    client.incoming.put_nowait(aiomqtt.MqttError("Disconnected during message iteration"))

    with pytest.raises(BrokerConnectionError):
        await asyncio.wait_for(
            run_sync_loop(bridge_state, client, clipboard, asyncio.Queue()), timeout=2
        )


@pytest.mark.asyncio
async def test_inbound_continues_after_publisher_stops(
    bridge_state: BridgeState, clipboard: FakeClipboard
) -> None:
    """Test a publish failure does not stop inbound delivery."""
    from mqclipsync.sync_loop import run_sync_loop

    client = FakeMqttClient()
    client.publish_error = aiomqtt.MqttError("publish refused")
    queue: asyncio.Queue = asyncio.Queue()
    queue.put_nowait(OutboundMessage("local"))

    task = asyncio.create_task(run_sync_loop(bridge_state, client, clipboard, queue))
    await wait_for(lambda: queue.empty())
    client.deliver(b"remote")
    await wait_for(lambda: clipboard.text == "remote")

    assert not task.done()
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_non_bytes_payload_is_dropped(
    bridge_state: BridgeState, clipboard: FakeClipboard
) -> None:
    """Test a message without a bytes payload is skipped."""
    from mqclipsync.sync_loop import run_sync_loop

    client = FakeMqttClient()
    task = asyncio.create_task(
        run_sync_loop(bridge_state, client, clipboard, asyncio.Queue())
    )
    client.deliver(None)
    client.deliver(b"after")
    await wait_for(lambda: clipboard.text == "after")
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task

    assert clipboard.writes == ["after"]
