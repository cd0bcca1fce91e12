"""Tests for the rain alert job."""

from collections.abc import Generator
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from pywebpush import WebPushException

from src.db.models import Database, Subscription
from src.notifications.rain_alerts import (
    RainForecast,
    build_payload,
    check_rain_alerts,
    find_upcoming_rain,
    group_subscriptions,
    is_throttled,
)
from src.weather.providers.openmeteo import FORECAST_URL
from tests.conftest import UpstreamMock
from tests.fixtures.weather_payloads import open_meteo_nowcast

NOW = datetime(2026, 10, 17, 12, 15)  # naive UTC


def _subscription(**overrides: object) -> Subscription:
    fields: dict = {
        "endpoint": "https://push.example.com/1",
        "p256dh": "k",
        "auth": "a",
        "lat": 40.4168,
        "lon": -3.7038,
        "city": "Madrid",
        "created_at": NOW,
    }
    fields.update(overrides)
    return Subscription(**fields)


class TestFindUpcomingRain:
    def test_first_slot_over_threshold(self) -> None:
        nowcast = open_meteo_nowcast(precipitation=[0.0, 0.05, 0.4, 1.2])

        rain = find_upcoming_rain(nowcast, window_minutes=60, threshold_mm=0.1)

        assert rain == RainForecast(time="14:45", precipitation=0.4)

    def test_dry(self) -> None:
        nowcast = open_meteo_nowcast(precipitation=[0.0, 0.0, 0.05])
        assert find_upcoming_rain(nowcast, 60, 0.1) is None

    def test_rain_after_window_ignored(self) -> None:
        nowcast = open_meteo_nowcast(precipitation=[0.0, 0.0, 0.0, 2.0])
        # 14:15 + 30 min ends at 14:45; the rain is at 15:00
        assert find_upcoming_rain(nowcast, 30, 0.1) is None

    def test_current_slot_counts_when_mid_slot(self) -> None:
        nowcast = {
            "current": {"time": "2026-10-17T14:20"},
            "minutely_15": {
                "time": ["2026-10-17T14:00", "2026-10-17T14:15", "2026-10-17T14:30"],
                "precipitation": [3.0, 0.6, 0.0],
            },
        }

        rain = find_upcoming_rain(nowcast, 60, 0.1)

        assert rain is not None
        assert rain.time == "14:15"

    def test_missing_data(self) -> None:
        assert find_upcoming_rain({}, 60, 0.1) is None
        assert find_upcoming_rain({"current": {"time": "2026-10-17T14:15"}}, 60, 0.1) is None


class TestHelpers:
    def test_grouping_rounds_coordinates(self) -> None:
        subs = [
            _subscription(endpoint="a", lat=40.4168, lon=-3.7038),
            _subscription(endpoint="b", lat=40.4183, lon=-3.7012),
            _subscription(endpoint="c", lat=41.3874, lon=2.1686),
        ]

        groups = group_subscriptions(subs)

        assert {key: [s.endpoint for s in members] for key, members in groups.items()} == {
            (40.42, -3.7): ["a", "b"],
            (41.39, 2.17): ["c"],
        }

    def test_throttle(self) -> None:
        assert not is_throttled(_subscription(), NOW)
        assert is_throttled(_subscription(last_notification=NOW - timedelta(minutes=30)), NOW)
        assert not is_throttled(_subscription(last_notification=NOW - timedelta(minutes=61)), NOW)

    def test_payload(self) -> None:
        payload = build_payload(_subscription(), RainForecast(time="14:45", precipitation=0.4))
        assert payload == {
            "title": "Lluvia a la vista",
            "body": "Empezará a llover en Madrid hacia las 14:45 (0.4 mm)",
            "url": "/",
            "tag": "rain-alert",
        }

    def test_payload_without_city(self) -> None:
        payload = build_payload(_subscription(city=None), RainForecast(time="09:00", precipitation=2.25))
        assert payload["body"] == "Empezará a llover en tu zona hacia las 09:00 (2.2 mm)"


@pytest.fixture
def alerts_db(test_database: Database) -> Generator[Database]:
    with patch("src.notifications.rain_alerts.db", test_database):
        yield test_database


def _subscribe(db: Database, endpoint: str, lat: float = 40.4168, lon: float = -3.7038) -> None:
    db.upsert_subscription(endpoint, "k", "a", lat, lon, "Madrid")


class TestCheckRainAlerts:
    def test_notifies_and_records(
        self, alerts_db: Database, upstream: UpstreamMock, mock_webpush: MagicMock
    ) -> None:
        _subscribe(alerts_db, "https://push.example.com/1")
        _subscribe(alerts_db, "https://push.example.com/2", lat=40.4183)
        upstream.add(FORECAST_URL, open_meteo_nowcast(precipitation=[0.0, 0.8]))

        result = check_rain_alerts(now=NOW)

        assert result.groups == 1
        assert result.notified == 2
        assert mock_webpush.call_count == 2
        # One nowcast per area
        assert upstream.called(FORECAST_URL) == 1
        assert upstream.params_for(FORECAST_URL)[0]["forecast_minutely_15"] == 5
        stored = alerts_db.get_subscription("https://push.example.com/1")
        assert stored is not None
        assert stored.last_notification == NOW

    def test_no_rain_no_push(self, alerts_db: Database, upstream: UpstreamMock, mock_webpush: MagicMock) -> None:
        _subscribe(alerts_db, "https://push.example.com/1")
        upstream.add(FORECAST_URL, open_meteo_nowcast())

        result = check_rain_alerts(now=NOW)

        assert result.notified == 0
        mock_webpush.assert_not_called()

    def test_throttled_subscribers_skip_fetch(
        self, alerts_db: Database, upstream: UpstreamMock, mock_webpush: MagicMock
    ) -> None:
        _subscribe(alerts_db, "https://push.example.com/1")
        alerts_db.mark_notified("https://push.example.com/1", NOW - timedelta(minutes=20))

        result = check_rain_alerts(now=NOW)

        assert result.throttled == 1
        assert upstream.calls == []
        mock_webpush.assert_not_called()

    def test_throttle_expires(self, alerts_db: Database, upstream: UpstreamMock, mock_webpush: MagicMock) -> None:
        _subscribe(alerts_db, "https://push.example.com/1")
        alerts_db.mark_notified("https://push.example.com/1", NOW - timedelta(hours=1, minutes=5))
        upstream.add(FORECAST_URL, open_meteo_nowcast(precipitation=[1.0]))

        assert check_rain_alerts(now=NOW).notified == 1

    def test_gone_subscription_removed(
        self, alerts_db: Database, upstream: UpstreamMock, mock_webpush: MagicMock
    ) -> None:
        _subscribe(alerts_db, "https://push.example.com/1")
        upstream.add(FORECAST_URL, open_meteo_nowcast(precipitation=[1.0]))
        mock_webpush.side_effect = WebPushException("Gone", response=MagicMock(status_code=410))

        result = check_rain_alerts(now=NOW)

        assert result.removed == 1
        assert alerts_db.get_subscription("https://push.example.com/1") is None

    def test_failed_push_not_recorded(
        self, alerts_db: Database, upstream: UpstreamMock, mock_webpush: MagicMock
    ) -> None:
        _subscribe(alerts_db, "https://push.example.com/1")
        upstream.add(FORECAST_URL, open_meteo_nowcast(precipitation=[1.0]))
        mock_webpush.side_effect = WebPushException("Server error", response=MagicMock(status_code=500))

        result = check_rain_alerts(now=NOW)

        assert result.failed == 1
        stored = alerts_db.get_subscription("https://push.example.com/1")
        assert stored is not None
        assert stored.last_notification is None

    def test_fetch_error_counted(self, alerts_db: Database, upstream: UpstreamMock, mock_webpush: MagicMock) -> None:
        _subscribe(alerts_db, "https://push.example.com/1")
        _subscribe(alerts_db, "https://push.example.com/2", lat=41.3874, lon=2.1686)

        result = check_rain_alerts(now=NOW)

        assert result.groups == 2
        assert result.fetch_errors == 2
        mock_webpush.assert_not_called()

    def test_push_disabled(self, alerts_db: Database, upstream: UpstreamMock, mock_webpush: MagicMock) -> None:
        _subscribe(alerts_db, "https://push.example.com/1")

        with patch("src.config.Config.VAPID_PUBLIC_KEY", ""):
            result = check_rain_alerts(now=NOW)

        assert result.groups == 0
        assert upstream.calls == []
