from pydantic import ValidationError

from sensor_monitor.errors import MalformedPayload
from sensor_monitor.logging_config import get_logger
from sensor_monitor.schemas import SensorReading


logger = get_logger(__name__)


def decode_payload(payload: bytes) -> SensorReading:
    """
    Decode one Tasmota telemetry message.

    A message without any sensor block is valid here; the forwarder has
    nothing to write for it.

    Raises:
        MalformedPayload: If the bytes are not UTF-8 JSON of the expected shape.
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedPayload(f"Payload is not valid UTF-8: {e}") from e

    try:
        reading = SensorReading.model_validate_json(text)
    except ValidationError as e:
        raise MalformedPayload(f"Payload does not match sensor schema: {e}") from e

    if reading.probe is None and reading.combined is None:
        logger.warning("decoder.no_sensor_data", time=reading.time.isoformat())

    return reading
