from types import MappingProxyType
from typing import Iterator, Mapping

from pydantic import BaseModel, ConfigDict

from sensor_monitor.errors import UnroutedTopic


class SensorIds(BaseModel):
    """Resolved hemrs ids of the four catalog sensors, shared by every device."""
    model_config = ConfigDict(frozen=True)

    probe_temperature: int
    combined_temperature: int
    combined_humidity: int
    combined_dew_point: int


class DeviceRoute(BaseModel):
    """What a subscribed topic resolves to."""
    model_config = ConfigDict(frozen=True)

    device_id: int
    sensor_ids: SensorIds


class RoutingTable:
    """
    Read-only map from exact topic string to DeviceRoute.

    Built once by the bootstrapper. There is no mutation API; the
    underlying dict is copied and exposed only through a mapping proxy.
    """

    def __init__(self, routes: Mapping[str, DeviceRoute]):
        self._routes: Mapping[str, DeviceRoute] = MappingProxyType(dict(routes))

    def lookup(self, topic: str) -> DeviceRoute:
        """
        Return the route for a topic.

        Raises:
            UnroutedTopic: If no device is configured for the topic.
        """
        route = self._routes.get(topic)
        if route is None:
            raise UnroutedTopic(topic)
        return route

    def topics(self) -> list[str]:
        return list(self._routes)

    def __contains__(self, topic: object) -> bool:
        return topic in self._routes

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RoutingTable({len(self._routes)} topics)"
