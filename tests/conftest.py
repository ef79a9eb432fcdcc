"""
Pytest configuration and shared fixtures.
"""
import json

import httpx
import pytest

from sensor_monitor.handlers.routing import DeviceRoute, RoutingTable, SensorIds


class FakeHemrs:
    """
    In-memory stand-in for the hemrs API, served through httpx.MockTransport.

    Records every request so tests can assert on creates and writes.
    """

    def __init__(self, devices=None, sensors=None, echo_id=False):
        self.devices = list(devices or [])
        self.sensors = list(sensors or [])
        self.measurements = []
        self.requests = []
        self.echo_id = echo_id
        self.fail_measurement_after = None
        self._next_id = 100

    def _create(self, collection, body):
        self._next_id += 1
        record = {"id": self._next_id, **body}
        collection.append(record)
        if self.echo_id:
            return httpx.Response(201, json=record)
        return httpx.Response(201, text="Created")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        body = json.loads(request.content) if request.content else None

        if request.url.path == "/api/devices":
            if request.method == "GET":
                return httpx.Response(200, json=self.devices)
            return self._create(self.devices, body)

        if request.url.path == "/api/sensors":
            if request.method == "GET":
                return httpx.Response(200, json=self.sensors)
            return self._create(self.sensors, body)

        if request.url.path == "/api/measurements":
            if self.fail_measurement_after is not None and len(self.measurements) >= self.fail_measurement_after:
                return httpx.Response(500, text="database unavailable")
            self.measurements.append(body)
            return httpx.Response(201, text="Created")

        return httpx.Response(404)

    def count(self, method, path):
        return sum(1 for m, p in self.requests if m == method and p == path)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url="http://hemrs", transport=httpx.MockTransport(self.handler))

@pytest.fixture
def hemrs():
    return FakeHemrs()

@pytest.fixture
async def hem_client(hemrs):
    async with hemrs.client() as client:
        yield client

@pytest.fixture
def sensor_ids():
    return SensorIds(
        probe_temperature=1,
        combined_temperature=2,
        combined_humidity=3,
        combined_dew_point=4,
    )

@pytest.fixture
def routing_table(sensor_ids):
    return RoutingTable({
        "tele/stue/SENSOR": DeviceRoute(device_id=42, sensor_ids=sensor_ids),
    })
