from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DeviceConfig(BaseModel):
    """
    One configured device: who it is and which topic it publishes on.

    Example (TOML):
        [[devices]]
        name = "esp32_stue"
        location = "Stue"
        topic = "tele/stue/SENSOR"
    """
    name: str = Field(min_length=1, strict=True)
    location: str = Field(min_length=1, strict=True)
    topic: str = Field(min_length=1, strict=True)

    @field_validator("topic")
    @classmethod
    def validate_topic(cls, value: str) -> str:
        """Routing is exact-match, so wildcard filters are rejected."""
        if "+" in value or "#" in value:
            raise ValueError(f"topic must not contain wildcards: {value}")
        return value


class DeviceFile(BaseModel):
    devices: List[DeviceConfig]


class Device(BaseModel):
    """Device record as returned by GET /api/devices."""
    id: int
    name: str
    location: str


class NewDevice(BaseModel):
    name: str
    location: str


class Sensor(BaseModel):
    """Sensor record as returned by GET /api/sensors."""
    id: int
    name: str
    unit: str


class NewSensor(BaseModel):
    name: str
    unit: str


class CreatedRecord(BaseModel):
    """The part of a create response we care about, when the store sends it."""
    id: int


class ProbeReading(BaseModel):
    """Single-probe temperature sensor (DS18B20)."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    probe_id: str = Field(alias="Id")
    temperature: float = Field(alias="Temperature")


class CombinedReading(BaseModel):
    """Combined humidity/temperature sensor (DHT11)."""
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    temperature: float = Field(alias="Temperature")
    humidity: float = Field(alias="Humidity")
    dew_point: float = Field(alias="DewPoint")


class SensorReading(BaseModel):
    """
    Tasmota style telemetry message.

    Example:
        {
            "Time": "2024-01-15T10:30:00",
            "DS18B20": {"Id": "3C01D607A1B2", "Temperature": 21.4},
            "DHT11": {"Temperature": 22.1, "Humidity": 41.0, "DewPoint": 8.3},
            "TempUnit": "C"
        }

    Both sensor blocks are optional; time and unit are required but unused.
    """
    model_config = ConfigDict(populate_by_name=True)

    time: datetime = Field(alias="Time")
    probe: Optional[ProbeReading] = Field(default=None, alias="DS18B20")
    combined: Optional[CombinedReading] = Field(default=None, alias="DHT11")
    temp_unit: str = Field(alias="TempUnit")


class Measurement(BaseModel):
    """One value written to POST /api/measurements."""
    device: int
    sensor: int
    measurement: float
