"""
Prometheus metrics.
Exposed on a dedicated port for Prometheus scraping.
"""
from prometheus_client import Counter, start_http_server

from sensor_monitor.logging_config import get_logger


logger = get_logger(__name__)

# Counters
messages_total = Counter(
    "sensor_monitor_messages_total",
    "Total publish messages received",
    ["topic"]
)

measurements_written_total = Counter(
    "sensor_monitor_measurements_written_total",
    "Total measurements written to hemrs",
    ["sensor"]
)

message_failures_total = Counter(
    "sensor_monitor_message_failures_total",
    "Total messages dropped by the dispatcher",
    ["reason"]
)

registrations_total = Counter(
    "sensor_monitor_registrations_total",
    "Device and sensor identity resolutions",
    ["kind", "outcome"]
)


def start_metrics_server(port: int) -> None:
    """Start the Prometheus exporter; port 0 disables it."""
    if not port:
        logger.info("metrics.disabled")
        return
    start_http_server(port)
    logger.info("metrics.started", port=port)
