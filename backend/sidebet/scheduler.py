"""Job scheduler using APScheduler."""

import logging

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from sidebet.config import Settings
from sidebet.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


def closing_soon_job(dispatcher: NotificationDispatcher) -> None:
    """One closing-soon sweep."""
    try:
        result = dispatcher.sweep_closing_soon()
    except Exception as e:
        logger.error(f"Closing-soon sweep failed: {e}", exc_info=True)
        return
    logger.info(str(result))


def build_scheduler(
    settings: Settings,
    dispatcher: NotificationDispatcher,
    scheduler_cls: type[BaseScheduler] = BlockingScheduler,
) -> BaseScheduler:
    """Create a scheduler with the sweep job registered (not started)."""
    scheduler = scheduler_cls()

    scheduler.add_job(
        closing_soon_job,
        IntervalTrigger(minutes=settings.scheduler.closing_soon_sweep_minutes),
        args=[dispatcher],
        id="closing-soon-sweep",
        name="Notifications: Closing Soon Sweep",
    )
    logger.info(
        f"Registered job: Closing Soon Sweep (every {settings.scheduler.closing_soon_sweep_minutes} min)"
    )
    return scheduler


def start_scheduler(settings: Settings, dispatcher: NotificationDispatcher) -> None:
    """Start the blocking scheduler until interrupted."""
    scheduler = build_scheduler(settings, dispatcher)

    try:
        logger.info("✓ Scheduler starting...")
        logger.info(f"✓ {len(scheduler.get_jobs())} jobs registered")
        logger.info("Press Ctrl+C to stop\n")

        scheduler.start()

    except (KeyboardInterrupt, SystemExit):
        logger.info("\nReceived interrupt signal")
        scheduler.shutdown()
        logger.info("✓ Scheduler stopped cleanly")
