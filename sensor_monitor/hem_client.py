"""HTTP client for the hemrs measurement store."""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx


DEVICES_PATH = "/api/devices"
SENSORS_PATH = "/api/sensors"
MEASUREMENTS_PATH = "/api/measurements"


@asynccontextmanager
async def get_hem_client(
    base_url: str,
    timeout: float = 5.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Get an HTTP client rooted at the hemrs base URL.

    Usage:
        async with get_hem_client(settings.hemrs_base_url) as client:
            await client.get(DEVICES_PATH)
    """
    client = httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=timeout,
        transport=transport,
    )
    try:
        yield client
    finally:
        await client.aclose()
