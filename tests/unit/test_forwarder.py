"""
Unit tests for the measurement forwarder.
Run: pytest tests/unit/test_forwarder.py -v
"""
from unittest.mock import AsyncMock

import pytest

from sensor_monitor.errors import TransportError, UnroutedTopic
from sensor_monitor.handlers.forwarder import build_measurements, forward, write_measurement
from sensor_monitor.schemas import Measurement, SensorReading


def make_reading(probe=True, combined=True) -> SensorReading:
    data = {"Time": "2024-01-15T10:30:00", "TempUnit": "C"}
    if probe:
        data["DS18B20"] = {"Id": "3C01D607A1B2", "Temperature": 21.5}
    if combined:
        data["DHT11"] = {"Temperature": 22.0, "Humidity": 40.0, "DewPoint": 8.0}
    return SensorReading.model_validate(data)


def written(hemrs):
    return {(m["device"], m["sensor"], m["measurement"]) for m in hemrs.measurements}


class TestBuildMeasurements:
    """Tests for build_measurements."""

    def test_combined_reading_yields_three_channels(self, routing_table):
        route = routing_table.lookup("tele/stue/SENSOR")

        pairs = build_measurements("tele/stue/SENSOR", route, make_reading(probe=False))

        assert [channel for channel, _ in pairs] == [
            "combined_temperature",
            "combined_humidity",
            "combined_dew_point",
        ]

    def test_empty_reading_yields_nothing(self, routing_table):
        route = routing_table.lookup("tele/stue/SENSOR")

        assert build_measurements("tele/stue/SENSOR", route, make_reading(False, False)) == []


class TestForward:
    """Tests for forward."""

    async def test_full_reading_writes_four_measurements(self, hemrs, hem_client, routing_table):
        """Test that probe + combined readings produce one write per channel."""
        count = await forward(hem_client, routing_table, "tele/stue/SENSOR", make_reading())

        assert count == 4
        assert hemrs.count("POST", "/api/measurements") == 4
        assert written(hemrs) == {
            (42, 1, 21.5),
            (42, 2, 22.0),
            (42, 3, 40.0),
            (42, 4, 8.0),
        }

    async def test_probe_only_writes_one_measurement(self, hemrs, hem_client, routing_table):
        count = await forward(hem_client, routing_table, "tele/stue/SENSOR", make_reading(combined=False))

        assert count == 1
        assert written(hemrs) == {(42, 1, 21.5)}

    async def test_combined_only_writes_three_measurements(self, hemrs, hem_client, routing_table):
        count = await forward(hem_client, routing_table, "tele/stue/SENSOR", make_reading(probe=False))

        assert count == 3
        assert written(hemrs) == {(42, 2, 22.0), (42, 3, 40.0), (42, 4, 8.0)}

    async def test_empty_reading_writes_nothing(self, hemrs, hem_client, routing_table):
        count = await forward(hem_client, routing_table, "tele/stue/SENSOR", make_reading(False, False))

        assert count == 0
        assert hemrs.requests == []

    async def test_unrouted_topic_writes_nothing(self, hemrs, hem_client, routing_table):
        """Test that an unknown topic raises UnroutedTopic before any write."""
        with pytest.raises(UnroutedTopic):
            await forward(hem_client, routing_table, "tele/kjeller/SENSOR", make_reading())

        assert hemrs.requests == []

    async def test_failed_write_aborts_remaining_writes(self, hemrs, hem_client, routing_table):
        """Test that the first failing write stops the rest and earlier writes stay."""
        hemrs.fail_measurement_after = 1

        with pytest.raises(TransportError):
            await forward(hem_client, routing_table, "tele/stue/SENSOR", make_reading())

        assert len(hemrs.measurements) == 1
        assert hemrs.count("POST", "/api/measurements") == 2


class TestWriteMeasurement:
    """Tests for write_measurement."""

    async def test_unencodable_body_raises_transport_error(self):
        """Test that a JSON encoding failure surfaces as TransportError."""
        client = AsyncMock()
        client.post.side_effect = ValueError("Out of range float values are not JSON compliant")

        with pytest.raises(TransportError) as exc_info:
            await write_measurement(client, Measurement(device=42, sensor=1, measurement=float("nan")))

        assert isinstance(exc_info.value.__cause__, ValueError)
