from typing import Callable, List, Optional, Sequence, Tuple, Union

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from sensor_monitor.errors import RegistrationError, TransportError
from sensor_monitor.handlers.routing import SensorIds
from sensor_monitor.hem_client import DEVICES_PATH, SENSORS_PATH
from sensor_monitor.logging_config import get_logger
from sensor_monitor.metrics import registrations_total
from sensor_monitor.schemas import CreatedRecord, Device, NewDevice, NewSensor, Sensor


logger = get_logger(__name__)

_device_list = TypeAdapter(List[Device])
_sensor_list = TypeAdapter(List[Sensor])

# (SensorIds field, hemrs name, unit)
SENSOR_CATALOG: Sequence[Tuple[str, str, str]] = (
    ("probe_temperature", "DS18B20", "°C"),
    ("combined_temperature", "DHT11 Temperature", "°C"),
    ("combined_humidity", "DHT11 Humidity", "%"),
    ("combined_dew_point", "DHT11 Dew Point", "°C"),
)


async def fetch_records(
    client: httpx.AsyncClient,
    path: str,
    adapter: TypeAdapter,
) -> list:
    """
    GET the full collection at ``path`` and decode it.

    Raises:
        TransportError: On network failure, non-2xx status or a body that
            is not the expected JSON array.
    """
    try:
        response = await client.get(path)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise TransportError(f"GET {path} failed: {e}") from e

    try:
        return adapter.validate_json(response.content)
    except ValidationError as e:
        raise TransportError(f"GET {path} returned an unexpected body: {e}") from e


async def create_record(
    client: httpx.AsyncClient,
    path: str,
    record: BaseModel,
) -> Optional[int]:
    """
    POST a new record. Returns its id if the store echoes one back.

    Raises:
        TransportError: On network failure or non-2xx status.
    """
    try:
        response = await client.post(path, json=record.model_dump())
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise TransportError(f"POST {path} failed: {e}") from e

    try:
        return CreatedRecord.model_validate_json(response.content).id
    except ValidationError:
        return None


async def get_or_create(
    client: httpx.AsyncClient,
    kind: str,
    path: str,
    adapter: TypeAdapter,
    matches: Callable[[Union[Device, Sensor]], bool],
    new_record: BaseModel,
) -> int:
    """
    Resolve a record id by its uniqueness key, creating the record if absent.

    1. Fetch the collection and scan for a match.
    2. On a miss, create the record. If the create response carries an
       id, use it.
    3. Otherwise re-fetch once. A record that is still missing raises
       RegistrationError instead of looping.

    Args:
        client: hemrs HTTP client
        kind: "device" or "sensor", for logs and metrics
        path: Collection path, e.g. "/api/devices"
        adapter: TypeAdapter decoding the collection
        matches: Uniqueness key predicate
        new_record: Creation payload (no id)

    Returns:
        The record id assigned by hemrs
    """
    for record in await fetch_records(client, path, adapter):
        if matches(record):
            registrations_total.labels(kind=kind, outcome="existing").inc()
            logger.info(f"registry.{kind}_resolved", record_id=record.id, **new_record.model_dump())
            return record.id

    created_id = await create_record(client, path, new_record)
    registrations_total.labels(kind=kind, outcome="created").inc()

    if created_id is not None:
        logger.info(f"registry.{kind}_created", record_id=created_id, **new_record.model_dump())
        return created_id

    for record in await fetch_records(client, path, adapter):
        if matches(record):
            logger.info(f"registry.{kind}_created", record_id=record.id, **new_record.model_dump())
            return record.id

    raise RegistrationError(
        f"{kind} {new_record.model_dump()} was created but is not listed by {path}"
    )


async def resolve_device(client: httpx.AsyncClient, name: str, location: str) -> int:
    """Get or create the device identified by (name, location)."""
    return await get_or_create(
        client,
        kind="device",
        path=DEVICES_PATH,
        adapter=_device_list,
        matches=lambda d: d.name == name and d.location == location,
        new_record=NewDevice(name=name, location=location),
    )


async def resolve_sensor(client: httpx.AsyncClient, name: str, unit: str) -> int:
    """Get or create the sensor identified by name."""
    return await get_or_create(
        client,
        kind="sensor",
        path=SENSORS_PATH,
        adapter=_sensor_list,
        matches=lambda s: s.name == name,
        new_record=NewSensor(name=name, unit=unit),
    )


async def resolve_sensor_ids(client: httpx.AsyncClient) -> SensorIds:
    """Resolve every catalog sensor, one after the other."""
    ids = {}
    for field, name, unit in SENSOR_CATALOG:
        ids[field] = await resolve_sensor(client, name, unit)
    return SensorIds(**ids)
