"""
Sensor monitor entry point.
Registers devices with hemrs, then bridges MQTT telemetry until stopped.
"""
import asyncio
import signal
import sys

from sensor_monitor.config import Settings, load_device_configs
from sensor_monitor.errors import BridgeError
from sensor_monitor.handlers.bootstrap import build_routing_table
from sensor_monitor.hem_client import get_hem_client
from sensor_monitor.logging_config import configure_logging, get_logger
from sensor_monitor.metrics import start_metrics_server
from sensor_monitor.subscriber import start


logger = get_logger(__name__)


def handle_shutdown(signum, frame):
    """Handle shutdown signals (SIGTERM, SIGINT)."""
    logger.info(
        "sensor_monitor.shutdown_signal_received",
        signal=signum
    )
    sys.exit(0)


async def run(settings: Settings) -> None:
    devices = load_device_configs(settings)
    start_metrics_server(settings.metrics_port)

    async with get_hem_client(settings.hemrs_base_url, settings.hem_timeout_seconds) as http_client:
        table = await build_routing_table(http_client, devices)
        await start(settings, http_client, table)


def main() -> None:
    settings = Settings(_cli_parse_args=True)
    configure_logging(settings.log_level, settings.app_env)

    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    logger.info("sensor_monitor.starting", hemrs_base_url=settings.hemrs_base_url)

    try:
        asyncio.run(run(settings))
    except SystemExit:
        logger.info("sensor_monitor.shutdown_complete")
        raise
    except BridgeError as e:
        logger.error(
            "sensor_monitor.fatal_error",
            error=str(e),
            error_type=type(e).__name__,
        )
        sys.exit(1)
    except Exception as e:
        logger.error(
            "sensor_monitor.fatal_error",
            error=str(e),
            exc_info=True
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
