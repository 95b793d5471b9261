import argparse
import asyncio
import signal
from pathlib import Path
from typing import Optional

from agrimonitor.core.api import APIController, APIServer
from agrimonitor.core.capture_scheduler import PeriodicCapture, start_periodic_capture
from agrimonitor.core.config_manager import get_config_manager
from agrimonitor.core.devices import SensorReader, StillCamera
from agrimonitor.core.document_store import JSONDocumentStore
from agrimonitor.core.logging_config import LOG_LEVELS, configure_logging
from agrimonitor.core.logging_utils import get_module_logger
from agrimonitor.core.paths import CONFIG_PATH
from agrimonitor.core.settings import Settings, settings_from_config


logger = get_module_logger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments. Unset flags fall back to the config file."""
    parser = argparse.ArgumentParser(
        description="AgriMonitor - DHT sensor and camera service for Raspberry Pi"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_PATH,
        help=f"Path to a 'key = value' config file (default: {CONFIG_PATH})"
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to bind the HTTP server to (default: 0.0.0.0)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="HTTP port (default: 3000)"
    )

    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default=None,
        help="Logging level (default: info)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this rotating file"
    )

    parser.add_argument(
        "--no-periodic-capture",
        dest="periodic_capture",
        action="store_false",
        default=None,
        help="Do not capture to the latest photo path on an interval"
    )

    parser.add_argument(
        "--no-warmup",
        dest="warmup_camera",
        action="store_false",
        default=None,
        help="Skip the camera warm-up capture at startup"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Include tracebacks in 500 responses"
    )

    return parser.parse_args(argv)


async def load_settings(args: argparse.Namespace) -> Settings:
    """Merge constants, the config file and CLI flags (highest priority)."""
    config = await get_config_manager().read_config_async(args.config)
    return settings_from_config(config).with_overrides(
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        log_file=args.log_file,
        periodic_capture=args.periodic_capture,
        warmup_camera=args.warmup_camera,
    )


def build_controller(settings: Settings) -> APIController:
    return APIController(
        settings=settings,
        sensor=SensorReader(),
        camera=StillCamera(settings.capture_command),
        documents=JSONDocumentStore(settings.data_file),
    )


async def run_service(settings: Settings, debug: bool = False) -> int:
    """Run the HTTP server and periodic capture until SIGINT/SIGTERM."""
    await asyncio.to_thread(settings.public_dir.mkdir, parents=True, exist_ok=True)
    await asyncio.to_thread(settings.latest_photo_path.parent.mkdir, parents=True, exist_ok=True)

    controller = build_controller(settings)
    server = APIServer(
        controller,
        host=settings.host,
        port=settings.port,
        public_dir=settings.public_dir,
        debug=debug,
    )
    scheduler: Optional[PeriodicCapture] = None

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass  # Windows doesn't support add_signal_handler

    try:
        await server.start()
    except OSError as e:
        logger.error("Could not start HTTP server on %s:%d: %s", settings.host, settings.port, e)
        return 1

    try:
        if settings.warmup_camera:
            await controller.camera.warmup()

        if settings.periodic_capture:
            scheduler = await start_periodic_capture(
                controller.camera,
                settings.capture_interval_ms,
                settings.latest_photo_path,
            )

        await stop_event.wait()
        logger.info("Shutdown requested")
    finally:
        if scheduler is not None:
            await scheduler.stop()
        await server.stop()

    return 0


async def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    settings = await load_settings(args)

    configure_logging(settings.log_level, log_file=settings.log_file)
    logger.debug("Settings: %s", settings)

    return await run_service(settings, debug=args.debug)


def run(argv: Optional[list[str]] = None) -> int:
    try:
        return asyncio.run(main(argv))
    except KeyboardInterrupt:
        return 130
