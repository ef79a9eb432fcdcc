"""
Unit tests for the topic routing table.
Run: pytest tests/unit/test_routing.py -v
"""
import pytest
from pydantic import ValidationError

from sensor_monitor.errors import UnroutedTopic
from sensor_monitor.handlers.routing import DeviceRoute, RoutingTable


class TestRoutingTable:
    """Tests for RoutingTable."""

    def test_lookup_returns_route(self, routing_table):
        route = routing_table.lookup("tele/stue/SENSOR")

        assert route.device_id == 42
        assert route.sensor_ids.combined_dew_point == 4

    def test_lookup_unknown_topic_raises_unrouted(self, routing_table):
        """Test that a missing topic raises UnroutedTopic naming the topic."""
        with pytest.raises(UnroutedTopic) as exc_info:
            routing_table.lookup("tele/kjeller/SENSOR")

        assert exc_info.value.topic == "tele/kjeller/SENSOR"
        assert "No device configured" in str(exc_info.value)

    def test_lookup_is_exact_match(self, routing_table):
        with pytest.raises(UnroutedTopic):
            routing_table.lookup("tele/stue/sensor")

        with pytest.raises(UnroutedTopic):
            routing_table.lookup("tele/stue/SENSOR/")

    def test_source_dict_changes_do_not_leak_in(self, sensor_ids):
        """Test that the table copies its input at construction."""
        routes = {"tele/stue/SENSOR": DeviceRoute(device_id=1, sensor_ids=sensor_ids)}
        table = RoutingTable(routes)

        routes["tele/kjeller/SENSOR"] = DeviceRoute(device_id=2, sensor_ids=sensor_ids)

        assert "tele/kjeller/SENSOR" not in table
        assert len(table) == 1

    def test_routes_are_frozen(self, routing_table):
        route = routing_table.lookup("tele/stue/SENSOR")

        with pytest.raises(ValidationError):
            route.device_id = 7

    def test_topics_and_iteration(self, routing_table):
        assert routing_table.topics() == ["tele/stue/SENSOR"]
        assert list(routing_table) == ["tele/stue/SENSOR"]
        assert "tele/stue/SENSOR" in routing_table
