"""Unit tests for Pydantic request schemas."""

from typing import Any

import pytest
from pydantic import ValidationError

from src.api.schemas import PushSubscriptionInfo, SubscribeRequest, UnsubscribeRequest


def _subscribe_body(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "subscription": {
            "endpoint": "https://fcm.googleapis.com/fcm/send/abc123",
            "keys": {"p256dh": "BNcRdreALRFX", "auth": "tBHItJI5svbpez7KI4CCXg"},
        },
        "lat": 40.4168,
        "lon": -3.7038,
        "city": "Madrid",
    }
    body.update(overrides)
    return body


class TestSubscribeRequest:
    def test_valid(self) -> None:
        request = SubscribeRequest.model_validate(_subscribe_body())

        assert request.subscription.keys.auth == "tBHItJI5svbpez7KI4CCXg"
        assert request.lat == 40.4168
        assert request.city == "Madrid"

    def test_city_optional_and_stripped(self) -> None:
        assert SubscribeRequest.model_validate(_subscribe_body(city=None)).city is None
        assert SubscribeRequest.model_validate(_subscribe_body(city="  Getafe ")).city == "Getafe"
        assert SubscribeRequest.model_validate(_subscribe_body(city="   ")).city is None

    def test_city_too_long(self) -> None:
        with pytest.raises(ValidationError):
            SubscribeRequest.model_validate(_subscribe_body(city="x" * 201))

    @pytest.mark.parametrize(
        "field,value",
        [("lat", 90.5), ("lat", -91), ("lon", 180.1), ("lon", -200), ("lat", "north")],
    )
    def test_coordinates_out_of_range(self, field: str, value: Any) -> None:
        with pytest.raises(ValidationError) as exc_info:
            SubscribeRequest.model_validate(_subscribe_body(**{field: value}))
        assert exc_info.value.errors()[0]["loc"] == (field,)

    def test_nan_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SubscribeRequest.model_validate(_subscribe_body(lat=float("nan")))

    def test_missing_subscription(self) -> None:
        body = _subscribe_body()
        del body["subscription"]
        with pytest.raises(ValidationError):
            SubscribeRequest.model_validate(body)


class TestPushSubscriptionInfo:
    def test_https_required(self) -> None:
        with pytest.raises(ValidationError, match="https://"):
            PushSubscriptionInfo.model_validate(
                {"endpoint": "http://push.example.com/1", "keys": {"p256dh": "k", "auth": "a"}}
            )

    def test_endpoint_length_limit(self) -> None:
        with pytest.raises(ValidationError):
            PushSubscriptionInfo.model_validate(
                {"endpoint": "https://" + "a" * 2048, "keys": {"p256dh": "k", "auth": "a"}}
            )

    def test_empty_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PushSubscriptionInfo.model_validate(
                {"endpoint": "https://push.example.com/1", "keys": {"p256dh": "", "auth": "a"}}
            )

    def test_extra_fields_ignored(self) -> None:
        info = PushSubscriptionInfo.model_validate(
            {
                "endpoint": "https://push.example.com/1",
                "expirationTime": None,
                "keys": {"p256dh": "k", "auth": "a"},
            }
        )
        assert info.endpoint == "https://push.example.com/1"


class TestUnsubscribeRequest:
    def test_valid(self) -> None:
        assert UnsubscribeRequest.model_validate({"endpoint": "https://push.example.com/1"}).endpoint

    def test_missing_endpoint(self) -> None:
        with pytest.raises(ValidationError):
            UnsubscribeRequest.model_validate({})
