"""Rain alert job: warn subscribers when rain is about to start.

Shared by both triggers:
- Production: systemd timer (scripts/run_rain_alerts.py)
- Development: background thread (src/notifications/scheduler.py)

Subscriptions are grouped by rounded coordinates so each area's 15-minute
precipitation nowcast is fetched once per run. A subscriber is notified at
most once per NOTIFICATION_THROTTLE_SECONDS.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import requests

from src.config import Config
from src.db.models import db
from src.db.models.dataclasses import Subscription
from src.notifications.push import PushError, PushGoneError, send_push
from src.utils.logging import get_logger
from src.weather.providers.openmeteo import fetch_nowcast

logger = get_logger(__name__)

# ~1 km grid; nearby subscribers share one nowcast
GROUP_PRECISION = 2


@dataclass
class RainAlertResult:
    """Counts from one rain alert run."""

    groups: int = 0
    notified: int = 0
    throttled: int = 0
    removed: int = 0
    failed: int = 0
    fetch_errors: int = 0


@dataclass
class RainForecast:
    """First nowcast slot with enough rain."""

    time: str  # local "HH:MM"
    precipitation: float


def group_key(lat: float, lon: float) -> tuple[float, float]:
    return round(lat, GROUP_PRECISION), round(lon, GROUP_PRECISION)


def group_subscriptions(subscriptions: list[Subscription]) -> dict[tuple[float, float], list[Subscription]]:
    groups: dict[tuple[float, float], list[Subscription]] = defaultdict(list)
    for subscription in subscriptions:
        groups[group_key(subscription.lat, subscription.lon)].append(subscription)
    return dict(groups)


def find_upcoming_rain(
    nowcast: dict[str, Any],
    window_minutes: int,
    threshold_mm: float,
) -> RainForecast | None:
    """First 15-minute slot within the window whose precipitation reaches the threshold.

    The window starts at the payload's current time (local, like the slots).
    """
    current_time = (nowcast.get("current") or {}).get("time")
    minutely = nowcast.get("minutely_15") or {}
    times: list[str] = minutely.get("time") or []
    values: list[float | None] = minutely.get("precipitation") or []
    if not current_time or not times:
        return None

    start = datetime.fromisoformat(current_time)
    slot_start = start - timedelta(minutes=start.minute % 15, seconds=start.second)
    end = start + timedelta(minutes=window_minutes)
    for slot, amount in zip(times, values, strict=False):
        slot_time = datetime.fromisoformat(slot)
        if slot_time < slot_start:
            continue
        if slot_time > end:
            break
        if amount is not None and amount >= threshold_mm:
            return RainForecast(time=slot_time.strftime("%H:%M"), precipitation=amount)
    return None


def is_throttled(subscription: Subscription, now: datetime) -> bool:
    """True if the subscriber was notified less than the throttle period ago."""
    if subscription.last_notification is None:
        return False
    return now - subscription.last_notification < timedelta(seconds=Config.NOTIFICATION_THROTTLE_SECONDS)


def build_payload(subscription: Subscription, rain: RainForecast) -> dict[str, Any]:
    place = subscription.city or "tu zona"
    return {
        "title": "Lluvia a la vista",
        "body": f"Empezará a llover en {place} hacia las {rain.time} ({rain.precipitation:.1f} mm)",
        "url": "/",
        "tag": "rain-alert",
    }


def check_rain_alerts(now: datetime | None = None) -> RainAlertResult:
    """Check every subscribed area and notify where rain is imminent.

    Args:
        now: Naive UTC reference time (defaults to now)

    Returns:
        RainAlertResult with per-run counts
    """
    now = now or datetime.now(UTC).replace(tzinfo=None)
    result = RainAlertResult()

    if not Config.push_enabled():
        logger.info("Rain alerts: push disabled, skipping")
        return result

    groups = group_subscriptions(db.list_subscriptions())
    result.groups = len(groups)
    logger.info("Rain alerts: checking areas", extra={"groups": len(groups)})

    for (lat, lon), members in groups.items():
        pending = [s for s in members if not is_throttled(s, now)]
        result.throttled += len(members) - len(pending)
        if not pending:
            continue

        try:
            nowcast = fetch_nowcast(lat, lon, forecast_minutes=Config.RAIN_ALERT_WINDOW_MINUTES + 15)
        except (requests.RequestException, ValueError) as e:
            logger.warning("Rain alerts: nowcast fetch failed", extra={"lat": lat, "lon": lon, "error": str(e)})
            result.fetch_errors += 1
            continue

        rain = find_upcoming_rain(
            nowcast,
            Config.RAIN_ALERT_WINDOW_MINUTES,
            Config.RAIN_ALERT_MIN_PRECIPITATION_MM,
        )
        if rain is None:
            continue

        for subscription in pending:
            try:
                send_push(subscription, build_payload(subscription, rain))
            except PushGoneError:
                db.delete_subscription(subscription.endpoint)
                result.removed += 1
                continue
            except PushError:
                result.failed += 1
                continue
            db.mark_notified(subscription.endpoint, now)
            result.notified += 1

    logger.info(
        "Rain alerts: run complete",
        extra={
            "groups": result.groups,
            "notified": result.notified,
            "throttled": result.throttled,
            "removed": result.removed,
            "failed": result.failed,
            "fetch_errors": result.fetch_errors,
        },
    )
    return result
