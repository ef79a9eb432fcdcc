from typing import Dict, Sequence

import httpx

from sensor_monitor.errors import ConfigurationError
from sensor_monitor.handlers.registry import resolve_device, resolve_sensor_ids
from sensor_monitor.handlers.routing import DeviceRoute, RoutingTable
from sensor_monitor.logging_config import get_logger
from sensor_monitor.schemas import DeviceConfig


logger = get_logger(__name__)


async def build_routing_table(
    client: httpx.AsyncClient,
    devices: Sequence[DeviceConfig],
) -> RoutingTable:
    """
    Register every configured device and the sensor catalog with hemrs.

    Sensor ids are resolved once and shared by all routes. A topic that
    appears twice keeps the later device (last write wins).

    Args:
        client: hemrs HTTP client
        devices: Validated device configuration

    Returns:
        The immutable routing table

    Raises:
        ConfigurationError: If no devices are configured
        TransportError / RegistrationError: If any resolution fails
    """
    if not devices:
        raise ConfigurationError("No devices configured; nothing to bridge")

    sensor_ids = await resolve_sensor_ids(client)
    logger.info("bootstrap.sensors_resolved", **sensor_ids.model_dump())

    routes: Dict[str, DeviceRoute] = {}
    for device in devices:
        device_id = await resolve_device(client, device.name, device.location)

        if device.topic in routes:
            logger.warning(
                "bootstrap.duplicate_topic",
                topic=device.topic,
                replaced_device_id=routes[device.topic].device_id,
                device_id=device_id,
            )

        routes[device.topic] = DeviceRoute(device_id=device_id, sensor_ids=sensor_ids)
        logger.info(
            "bootstrap.route_added",
            topic=device.topic,
            device_id=device_id,
            name=device.name,
            location=device.location,
        )

    table = RoutingTable(routes)
    logger.info("bootstrap.complete", topic_count=len(table))
    return table
