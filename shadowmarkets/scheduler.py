"""Fixed-interval poll loop using APScheduler."""

import logging
import signal
from datetime import datetime, timezone

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from shadowmarkets.config import Role
from shadowmarkets.pipeline import Runtime, creation_job, oracle_job

logger = logging.getLogger(__name__)


def build_scheduler(runtime: Runtime, role: Role) -> BlockingScheduler:
    """One worker thread and one instance per job, so ticks never overlap."""
    settings = runtime.settings
    scheduler = BlockingScheduler(
        executors={"default": ThreadPoolExecutor(max_workers=1)},
        job_defaults={"max_instances": 1, "coalesce": True},
    )
    start = datetime.now(timezone.utc)

    if role in ("creation", "all"):
        scheduler.add_job(
            creation_job,
            IntervalTrigger(seconds=settings.scheduler.creation_interval_seconds),
            args=[runtime],
            id="market-creation",
            name="Creation: Next Market",
            next_run_time=start,
        )
        logger.info(
            f"Registered job: Market Creation (every {settings.scheduler.creation_interval_seconds}s)"
        )

    if role in ("oracle", "all"):
        scheduler.add_job(
            oracle_job,
            IntervalTrigger(seconds=settings.scheduler.oracle_interval_seconds),
            args=[runtime],
            id="oracle-sweep",
            name="Oracle: Settlement Sweep",
            next_run_time=start,
        )
        logger.info(
            f"Registered job: Oracle Sweep (every {settings.scheduler.oracle_interval_seconds}s)"
        )

    return scheduler


def start_scheduler(runtime: Runtime, role: Role) -> None:
    """Run the poll loop until SIGINT/SIGTERM."""
    scheduler = build_scheduler(runtime, role)

    def _handle_signal(signum: int, frame: object) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, shutting down")
        scheduler.shutdown(wait=False)

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    logger.info(f"✓ Scheduler starting (role={role}, {len(scheduler.get_jobs())} jobs)")
    logger.info("Press Ctrl+C to stop\n")
    scheduler.start()
    logger.info("✓ Scheduler stopped cleanly")
