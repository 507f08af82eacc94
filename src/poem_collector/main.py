"""
Poem Collector - Main Application
=================================

Startup glue for the scheduled fetch-then-store pipeline.

STARTUP:
1. Setup structured logging
2. Load the JSON configuration file
3. Connect to the database
4. Validate the schedule and start the scheduler

SHUTDOWN (SIGINT / SIGTERM):
1. Stop the scheduler
2. Close the HTTP client
3. Dispose of the database engine

Any startup failure is logged and the process exits with status 1.
"""

import asyncio
import contextlib
import signal
from typing import Optional

from poem_collector.config import Settings, get_settings, load_config
from poem_collector.core import ConfigError, ConnectError, ScheduleError
from poem_collector.infrastructure.database import close_database, connect
from poem_collector.poems.application import PoemCollectionService
from poem_collector.poems.infrastructure import (
    JinrishiciClient,
    PoemScheduler,
    SQLAlchemyPoemRepository,
)
from poem_collector.shared.infrastructure.logging import get_logger, setup_logging

logger = get_logger(__name__)


def _install_signal_handlers(stop_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(sig, stop_event.set)


async def run(
    stop_event: Optional[asyncio.Event] = None,
    settings: Optional[Settings] = None,
    fetcher: Optional[JinrishiciClient] = None,
) -> int:
    """
    Start the service and block until ``stop_event`` is set.

    Returns:
        Process exit status: 0 after a clean shutdown, 1 on startup failure
    """
    settings = settings or get_settings()

    try:
        setup_logging(settings.log_level, settings.log_path, service=settings.app_name)
    except OSError as e:
        logger.error(
            "Open log file error",
            extra={"path": str(settings.log_path), "error": str(e)}
        )
        return 1

    try:
        config = load_config(settings.config_path)
    except ConfigError as e:
        logger.error(e.message, extra=e.details)
        return 1

    try:
        engine = await connect(config.database, settings)
    except ConnectError as e:
        logger.error(e.message, extra=e.details)
        return 1

    fetcher = fetcher or JinrishiciClient(timeout=settings.http_timeout_seconds)
    repository = SQLAlchemyPoemRepository(engine)
    service = PoemCollectionService(fetcher, repository, config.token)

    try:
        scheduler = PoemScheduler(config.schedule, service.collect)
    except ScheduleError as e:
        logger.error("Time func create error: " + e.message, extra=e.details)
        await fetcher.close()
        await close_database(engine)
        return 1

    if stop_event is None:
        stop_event = asyncio.Event()
        _install_signal_handlers(stop_event)

    logger.info("Poem EXE START", extra={"schedule": config.schedule})
    try:
        await scheduler.serve(stop_event)
    finally:
        await fetcher.close()
        await close_database(engine)

    logger.info("Poem collector shutdown complete")
    return 0


def main() -> int:
    """Console script entry point."""
    return asyncio.run(run())


if __name__ == "__main__":
    raise SystemExit(main())
