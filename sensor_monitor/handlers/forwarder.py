from typing import List, Tuple

import httpx

from sensor_monitor.errors import TransportError
from sensor_monitor.handlers.routing import DeviceRoute, RoutingTable
from sensor_monitor.hem_client import MEASUREMENTS_PATH
from sensor_monitor.logging_config import get_logger
from sensor_monitor.metrics import measurements_written_total
from sensor_monitor.schemas import Measurement, SensorReading


logger = get_logger(__name__)


def build_measurements(
    topic: str,
    route: DeviceRoute,
    reading: SensorReading,
) -> List[Tuple[str, Measurement]]:
    """
    Turn a decoded reading into (channel, Measurement) pairs.

    The combined sensor yields three measurements and the probe one. A
    missing block is logged and contributes nothing.
    """
    ids = route.sensor_ids
    measurements: List[Tuple[str, Measurement]] = []

    if reading.combined is not None:
        combined = reading.combined
        measurements.extend([
            ("combined_temperature", Measurement(
                device=route.device_id, sensor=ids.combined_temperature, measurement=combined.temperature)),
            ("combined_humidity", Measurement(
                device=route.device_id, sensor=ids.combined_humidity, measurement=combined.humidity)),
            ("combined_dew_point", Measurement(
                device=route.device_id, sensor=ids.combined_dew_point, measurement=combined.dew_point)),
        ])
    else:
        logger.warning("forwarder.combined_missing", topic=topic, device_id=route.device_id)

    if reading.probe is not None:
        measurements.append(("probe_temperature", Measurement(
            device=route.device_id, sensor=ids.probe_temperature, measurement=reading.probe.temperature)))
    else:
        logger.warning("forwarder.probe_missing", topic=topic, device_id=route.device_id)

    return measurements


async def write_measurement(client: httpx.AsyncClient, measurement: Measurement) -> None:
    """
    POST one measurement to hemrs.

    Raises:
        TransportError: On network failure, non-2xx status or a value that
            cannot be encoded as JSON.
    """
    try:
        response = await client.post(MEASUREMENTS_PATH, json=measurement.model_dump())
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise TransportError(f"POST {MEASUREMENTS_PATH} failed: {e}") from e
    except ValueError as e:
        # json encoding rejects NaN and infinity
        raise TransportError(f"POST {MEASUREMENTS_PATH} body not encodable: {e}") from e


async def forward(
    client: httpx.AsyncClient,
    table: RoutingTable,
    topic: str,
    reading: SensorReading,
) -> int:
    """
    Write every measurement in a reading for the device routed at ``topic``.

    Writes are sequential and independent. The first failing write aborts
    the rest, so earlier writes of the same reading stay recorded.

    Returns:
        Number of measurements written

    Raises:
        UnroutedTopic: If the topic has no route; nothing is written.
        TransportError: If a write fails.
    """
    route = table.lookup(topic)

    written = 0
    for channel, measurement in build_measurements(topic, route, reading):
        await write_measurement(client, measurement)
        measurements_written_total.labels(sensor=channel).inc()
        written += 1
        logger.debug(
            "forwarder.measurement_written",
            topic=topic,
            channel=channel,
            **measurement.model_dump(),
        )

    logger.info("forwarder.reading_stored", topic=topic, device_id=route.device_id, measurement_count=written)
    return written
