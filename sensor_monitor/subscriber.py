"""
MQTT subscriber for sensor telemetry.
Subscribes to every routed topic and feeds the dispatcher.
"""
import asyncio
import socket
from typing import AsyncIterator, Iterable

import aiomqtt
import httpx

from sensor_monitor.config import Settings
from sensor_monitor.events import ControlPacket, Event, Incoming, Outgoing, Publish
from sensor_monitor.handlers.dispatcher import dispatch
from sensor_monitor.handlers.routing import RoutingTable
from sensor_monitor.logging_config import get_logger


logger = get_logger(__name__)

MAX_RETRY_DELAY = 60


def client_identifier() -> str:
    return f"sensor_monitor_{socket.gethostname()}"


def payload_bytes(payload) -> bytes:
    """aiomqtt hands out bytes, str, numbers or None; the decoder wants bytes."""
    if payload is None:
        return b""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    return str(payload).encode("utf-8")


async def mqtt_events(
    client: aiomqtt.Client,
    topics: Iterable[str],
) -> AsyncIterator[Event]:
    """
    Present an open MQTT connection as a flat event stream.

    Yields the connack, one outgoing event per subscription (QoS 0,
    at-most-once), then every inbound publish until the connection drops.
    """
    yield Incoming(packet=ControlPacket(kind="connack"))

    for topic in topics:
        await client.subscribe(topic, qos=0)
        logger.info("mqtt.subscribed", topic=topic)
        yield Outgoing(description=f"subscribe {topic}")

    async for message in client.messages:
        yield Incoming(packet=Publish(
            topic=str(message.topic),
            payload=payload_bytes(message.payload),
        ))


async def start(
    settings: Settings,
    http_client: httpx.AsyncClient,
    table: RoutingTable,
) -> None:
    """
    Run the MQTT subscriber with automatic reconnection.

    Broker connection errors are retried with exponential backoff (1s up
    to 60s) and the same routing table is reused after each reconnect.
    hemrs errors never reach this level; the dispatcher drops the
    affected message.
    """
    retry_delay = 1
    identifier = client_identifier()

    while True:
        try:
            async with aiomqtt.Client(
                hostname=settings.mqtt_host,
                port=settings.mqtt_port,
                username=settings.mqtt_username if settings.mqtt_username else None,
                password=settings.mqtt_password if settings.mqtt_password else None,
                identifier=identifier,
                keepalive=settings.mqtt_keepalive,
            ) as client:
                retry_delay = 1

                logger.info(
                    "mqtt.connected",
                    host=settings.mqtt_host,
                    port=settings.mqtt_port,
                    identifier=identifier,
                )

                await dispatch(http_client, table, mqtt_events(client, table.topics()))

            logger.info("mqtt.stream_ended")
            return

        except aiomqtt.MqttError as e:
            logger.error(
                "mqtt.disconnected",
                error=str(e),
                retry_in=retry_delay
            )
            await asyncio.sleep(retry_delay)
            retry_delay = min(retry_delay * 2, MAX_RETRY_DELAY)
