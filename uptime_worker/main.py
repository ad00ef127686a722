"""Entry point wiring the worker components together."""

import asyncio
import signal
from pathlib import Path

from uptime_worker import __version__
from uptime_worker.config import Config, load_config
from uptime_worker.core.alerts import AlertDispatcher
from uptime_worker.core.check_logger import CheckLogger
from uptime_worker.core.locks import CheckLockManager
from uptime_worker.core.messaging import TwilioSmsClient
from uptime_worker.core.metrics import MetricsCollector
from uptime_worker.core.persister import StatePersister
from uptime_worker.core.pipeline import CheckPipeline
from uptime_worker.core.probe import ProbeExecutor
from uptime_worker.core.rotation import LogRotator
from uptime_worker.core.scheduler import CheckScheduler
from uptime_worker.core.service import WorkerService
from uptime_worker.database.session import init_models, setup_database
from uptime_worker.storage.logs import LogStore
from uptime_worker.storage.records import RecordStore
from uptime_worker.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


async def run(config: Config) -> None:
    """
    Run the worker until SIGINT or SIGTERM.

    Args:
        config: Loaded application configuration
    """
    if "sqlite" in config.database.url:
        Path("data").mkdir(exist_ok=True)

    engine, session_factory = setup_database(config.database)
    await init_models(engine)

    metrics = MetricsCollector()
    if config.prometheus.enabled:
        metrics.serve(config.prometheus.port)

    locks = CheckLockManager.from_config(config.redis)
    if config.redis.enabled and not await locks.test_connection():
        logger.warning(
            "Redis is enabled but connection failed. "
            "Single-flight locks will be in-memory (not shared across workers)"
        )

    category = config.worker.checks_category
    store = RecordStore(session_factory)
    log_store = LogStore(config.logs.directory)
    probe = ProbeExecutor(max_connections=config.worker.max_concurrent_checks)

    pipeline = CheckPipeline(
        store=store,
        probe=probe,
        persister=StatePersister(store, category=category),
        dispatcher=AlertDispatcher(TwilioSmsClient(config.sms), metrics=metrics),
        check_logger=CheckLogger(log_store),
        category=category,
        metrics=metrics
    )
    check_scheduler = CheckScheduler(
        store=store,
        pipeline=pipeline,
        locks=locks,
        max_concurrent=config.worker.max_concurrent_checks,
        category=category,
        metrics=metrics
    )
    service = WorkerService(
        config=config.worker,
        check_scheduler=check_scheduler,
        log_rotator=LogRotator(log_store, metrics=metrics),
        probe=probe
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop_event.set)

    await service.start()
    logger.info(
        "Uptime Worker started successfully",
        extra={
            "version": __version__,
            "database": config.database.type,
            "log_directory": config.logs.directory,
            "sms_enabled": config.sms.enabled,
            "redis_enabled": config.redis.enabled
        }
    )

    try:
        await stop_event.wait()
        logger.info("Received shutdown signal, initiating graceful shutdown")
    finally:
        await service.stop()
        await locks.close()
        await engine.dispose()
        logger.info("Uptime Worker shut down successfully")


def main() -> None:
    """Console script entry point."""
    config = load_config()
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file,
        console=config.logging.console
    )
    asyncio.run(run(config))


if __name__ == "__main__":
    main()
