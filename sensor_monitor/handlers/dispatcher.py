from typing import AsyncIterable

import httpx

from sensor_monitor.errors import MalformedPayload, TransportError, UnroutedTopic
from sensor_monitor.events import Event, Incoming, Publish
from sensor_monitor.handlers.decoder import decode_payload
from sensor_monitor.handlers.forwarder import forward
from sensor_monitor.handlers.routing import RoutingTable
from sensor_monitor.logging_config import get_logger
from sensor_monitor.metrics import message_failures_total, messages_total


logger = get_logger(__name__)


async def process_message(
    client: httpx.AsyncClient,
    table: RoutingTable,
    topic: str,
    payload: bytes,
) -> int:
    """
    Decode one publish payload and forward it to hemrs.

    Returns:
        Number of measurements written

    Raises:
        MalformedPayload, UnroutedTopic, TransportError
    """
    reading = decode_payload(payload)
    return await forward(client, table, topic, reading)


async def handle_event(
    client: httpx.AsyncClient,
    table: RoutingTable,
    event: Event,
) -> None:
    """
    Handle a single transport event.

    Publish packets go through decode and forward, and their failures
    propagate. Everything else is only logged.
    """
    if isinstance(event, Incoming) and isinstance(event.packet, Publish):
        packet = event.packet
        messages_total.labels(topic=packet.topic).inc()
        logger.info("dispatcher.payload_received", topic=packet.topic, size=len(packet.payload))
        await process_message(client, table, packet.topic, packet.payload)
    elif isinstance(event, Incoming):
        logger.info("dispatcher.packet_received", kind=event.packet.kind, detail=event.packet.detail)
    else:
        logger.info("dispatcher.sending", description=event.description)


async def dispatch(
    client: httpx.AsyncClient,
    table: RoutingTable,
    events: AsyncIterable[Event],
) -> None:
    """
    Drain the transport event stream until it ends.

    Each publish is handled inside its own failure boundary: a bad payload,
    an unrouted topic or a hemrs error drops that message only and the
    loop carries on with the next event.
    """
    async for event in events:
        try:
            await handle_event(client, table, event)
        except MalformedPayload as e:
            message_failures_total.labels(reason="malformed_payload").inc()
            logger.warning("dispatcher.malformed_payload", topic=event.packet.topic, error=str(e))
        except UnroutedTopic as e:
            message_failures_total.labels(reason="unrouted_topic").inc()
            logger.warning("dispatcher.unrouted_topic", topic=e.topic, error=str(e))
        except TransportError as e:
            message_failures_total.labels(reason="transport").inc()
            logger.error("dispatcher.message_failed", topic=event.packet.topic, error=str(e))
