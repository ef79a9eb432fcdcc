"""Sensor monitor: MQTT telemetry to hemrs measurement bridge."""

__version__ = "0.2.0"
