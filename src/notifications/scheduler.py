"""Development trigger for the rain alert job.

In development a daemon thread runs check_rain_alerts() every
RAIN_ALERT_INTERVAL_SECONDS. Production uses a systemd timer that runs
scripts/run_rain_alerts.py instead.
"""

import threading

from src.config import Config
from src.utils.logging import get_logger

logger = get_logger(__name__)

_scheduler_thread: threading.Thread | None = None
_stop_event: threading.Event | None = None


def _scheduler_loop(stop_event: threading.Event, interval_seconds: float) -> None:
    from src.notifications.rain_alerts import check_rain_alerts

    logger.info("Rain alert scheduler: loop started", extra={"interval_seconds": interval_seconds})

    while not stop_event.is_set():
        try:
            check_rain_alerts()
        except Exception as e:
            logger.error(f"Rain alert scheduler: run failed: {e}", exc_info=True)

        stop_event.wait(interval_seconds)

    logger.info("Rain alert scheduler: loop stopped")


def start_dev_scheduler(interval_seconds: float | None = None) -> bool:
    """Start the background loop in development mode.

    Safe to call more than once.

    Returns:
        True if a new thread was started
    """
    global _scheduler_thread, _stop_event

    if not Config.is_development() or not Config.push_enabled():
        return False

    if _scheduler_thread is not None and _scheduler_thread.is_alive():
        return False

    _stop_event = threading.Event()
    _scheduler_thread = threading.Thread(
        target=_scheduler_loop,
        args=(_stop_event, interval_seconds or Config.RAIN_ALERT_INTERVAL_SECONDS),
        daemon=True,
        name="DevRainAlertScheduler",
    )
    _scheduler_thread.start()
    return True


def stop_dev_scheduler() -> None:
    """Stop the background loop if it is running."""
    global _scheduler_thread, _stop_event

    if _stop_event is not None:
        _stop_event.set()

    if _scheduler_thread is not None and _scheduler_thread.is_alive():
        _scheduler_thread.join(timeout=5)

    _scheduler_thread = None
    _stop_event = None


def is_running() -> bool:
    return _scheduler_thread is not None and _scheduler_thread.is_alive()
