"""Push routes: VAPID key and rain alert subscriptions."""

from typing import Any

from apiflask import APIBlueprint

from src.api.errors import raise_not_found_error
from src.api.rate_limiting import rate_limit_push
from src.api.schemas import SubscribeRequest, UnsubscribeRequest
from src.api.validation import validate_request
from src.config import Config
from src.db.models import db
from src.utils.logging import get_logger

logger = get_logger(__name__)

api = APIBlueprint("push", __name__, url_prefix="/api/push", tag="Push")


@api.route("/public-key", methods=["GET"])
@api.doc(responses=[404])
def public_key() -> dict[str, str]:
    """VAPID application server key for PushManager.subscribe()."""
    if not Config.push_enabled():
        raise_not_found_error("Push notifications", message="Push notifications are not enabled")
    return {"publicKey": Config.VAPID_PUBLIC_KEY}


@api.route("/subscribe", methods=["POST"])
@api.doc(responses=[400, 404, 429])
@rate_limit_push
@validate_request(SubscribeRequest)
def subscribe(data: SubscribeRequest) -> tuple[dict[str, Any], int]:
    """Store (or refresh) a subscription for rain alerts at the given point."""
    if not Config.push_enabled():
        raise_not_found_error("Push notifications", message="Push notifications are not enabled")

    subscription = db.upsert_subscription(
        endpoint=data.subscription.endpoint,
        p256dh=data.subscription.keys.p256dh,
        auth=data.subscription.keys.auth,
        lat=data.lat,
        lon=data.lon,
        city=data.city,
    )
    return {
        "status": "subscribed",
        "city": subscription.city,
        "lat": subscription.lat,
        "lon": subscription.lon,
    }, 201


@api.route("/unsubscribe", methods=["POST"])
@api.doc(responses=[400, 404, 429])
@rate_limit_push
@validate_request(UnsubscribeRequest)
def unsubscribe(data: UnsubscribeRequest) -> dict[str, str]:
    """Remove a subscription."""
    if not db.delete_subscription(data.endpoint):
        raise_not_found_error("Subscription")
    return {"status": "unsubscribed"}
