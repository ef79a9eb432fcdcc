import tomllib
from pathlib import Path
from typing import List

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from sensor_monitor.errors import ConfigurationError
from sensor_monitor.logging_config import get_logger
from sensor_monitor.schemas import DeviceConfig, DeviceFile


logger = get_logger(__name__)


class Settings(BaseSettings):
    """Sensor monitor settings loaded from environment variables or CLI flags."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # hemrs
    hemrs_base_url: str = Field(default="http://hemrs")
    hem_timeout_seconds: float = Field(default=5.0)

    # MQTT
    mqtt_host: str = Field(default="localhost")
    mqtt_port: int = Field(default=1883)
    mqtt_username: str = Field(default="")
    mqtt_password: str = Field(default="")
    mqtt_keepalive: int = Field(default=5)

    # Devices
    config_path: Path = Field(default=Path("config.toml"))
    # Single-device deployments predating the config file
    device_name: str = Field(default="")
    device_location: str = Field(default="")
    topic: str = Field(default="")

    # App
    metrics_port: int = Field(default=9000)
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")


def parse_device_config(toml_str: str) -> List[DeviceConfig]:
    """
    Parse and validate a TOML device list.

    Raises:
        ConfigurationError: If the TOML is invalid, an entry is incomplete,
            or the list is empty.
    """
    try:
        data = tomllib.loads(toml_str)
        device_file = DeviceFile.model_validate(data)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid device config: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"Invalid device config: {e}") from e

    if not device_file.devices:
        raise ConfigurationError("Device config contains no devices")

    return device_file.devices


def load_device_configs(settings: Settings) -> List[DeviceConfig]:
    """
    Load the device list for this process.

    The TOML file at ``settings.config_path`` wins. When it does not exist,
    the legacy DEVICE_NAME / DEVICE_LOCATION / TOPIC variables describe a
    single device.
    """
    path = settings.config_path

    if path.exists():
        try:
            toml_str = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read device config {path}: {e}") from e

        devices = parse_device_config(toml_str)
        logger.info("config.loaded", path=str(path), device_count=len(devices))
        return devices

    if settings.device_name and settings.device_location and settings.topic:
        try:
            device = DeviceConfig(
                name=settings.device_name,
                location=settings.device_location,
                topic=settings.topic,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid device settings: {e}") from e

        logger.info("config.loaded_from_env", device_count=1, topic=device.topic)
        return [device]

    raise ConfigurationError(
        f"No device config found at {path} and DEVICE_NAME/DEVICE_LOCATION/TOPIC not set"
    )
