"""Background Worker for the Baby Care backend services.

This module is the scheduler trigger for the appointment reminder dispatcher.

The worker:
- Runs one dispatch pass every WORKER_CHECK_INTERVAL seconds (default: daily)
- Relies on the dispatcher's reminder_sent filter, so restarts and extra
  passes never send a reminder twice
- Logs failed passes and keeps running; failed reminders are retried on
  the next pass
"""

import asyncio
import signal
import sys
from datetime import datetime, timezone

import database
from config import settings
from dispatcher import ReminderDispatcher
from logger_config import setup_logger
from notifier import Notifier, build_notifier

logger = setup_logger(__name__, 'worker.log')

# Global flag for graceful shutdown
shutdown_requested = False


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    global shutdown_requested
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    shutdown_requested = True


async def dispatch_once(notifier: Notifier):
    """Run a single reminder dispatch pass with its own session.

    Returns:
        DispatchResult, or None if the pass could not run
    """
    db = database.SessionLocal()
    try:
        dispatcher = ReminderDispatcher(
            db,
            notifier,
            lead_days=settings.REMINDER_LEAD_DAYS,
            tz_name=settings.REMINDER_TIMEZONE
        )
        result = await dispatcher.run(datetime.now(timezone.utc))
        if result.failures:
            logger.warning(
                f"{len(result.failures)} reminder(s) failed and will be retried next pass: "
                f"{', '.join(result.failures)}"
            )
        return result
    except Exception as e:
        logger.error(f"Error in dispatch pass: {str(e)}", exc_info=True)
        return None
    finally:
        db.close()


async def worker_loop():
    """Main worker loop that runs continuously."""
    logger.info("Background worker started")
    logger.info(f"Worker enabled: {settings.WORKER_ENABLED}")
    logger.info(f"Check interval: {settings.WORKER_CHECK_INTERVAL} seconds")
    logger.info(f"Reminder lead days: {settings.REMINDER_LEAD_DAYS} ({settings.REMINDER_TIMEZONE})")

    if not settings.WORKER_ENABLED:
        logger.warning("Worker is disabled in configuration. Exiting.")
        return

    notifier = build_notifier(settings)
    logger.info(f"Notifier: {type(notifier).__name__}")

    iteration = 0
    while not shutdown_requested:
        iteration += 1
        logger.debug(f"Worker iteration {iteration} started")

        await dispatch_once(notifier)

        logger.debug(f"Worker iteration {iteration} completed")

        # Break sleep into 1-second intervals to allow quick shutdown
        for _ in range(settings.WORKER_CHECK_INTERVAL):
            if shutdown_requested:
                break
            await asyncio.sleep(1)

    logger.info("Background worker shutting down gracefully")


def main():
    """Main entry point for the background worker."""
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    logger.info("=" * 60)
    logger.info("Baby Care Service - Reminder Worker")
    logger.info("=" * 60)

    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Fatal error in background worker: {str(e)}", exc_info=True)
        sys.exit(1)

    logger.info("Background worker stopped")
    sys.exit(0)


if __name__ == "__main__":
    main()
