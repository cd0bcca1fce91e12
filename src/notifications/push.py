"""Web Push delivery via pywebpush (VAPID)."""

import json
from typing import Any

from pywebpush import WebPushException, webpush

from src.config import Config
from src.db.models.dataclasses import Subscription
from src.utils.logging import get_logger

logger = get_logger(__name__)

# Push services answer these when the subscription no longer exists
GONE_STATUS_CODES = frozenset({404, 410})


class PushError(Exception):
    """Delivering a push message failed."""


class PushGoneError(PushError):
    """The push endpoint is gone; the subscription should be deleted."""


def _status_of(error: WebPushException) -> int | None:
    response = getattr(error, "response", None)
    return getattr(response, "status_code", None)


def send_push(subscription: Subscription, payload: dict[str, Any]) -> None:
    """Send one notification.

    Args:
        subscription: Stored subscription (endpoint and keys)
        payload: JSON-serializable message for the service worker
            ({"title", "body", "url", "tag"})

    Raises:
        PushGoneError: Endpoint answered 404/410
        PushError: Push is not configured, or delivery failed otherwise
    """
    if not Config.push_enabled():
        raise PushError("VAPID keys are not configured")

    try:
        webpush(
            subscription_info=subscription.to_subscription_info(),
            data=json.dumps(payload),
            vapid_private_key=Config.VAPID_PRIVATE_KEY,
            # webpush adds aud/exp to the claims dict, so pass a fresh one
            vapid_claims={"sub": Config.VAPID_SUBJECT},
            ttl=Config.PUSH_TTL_SECONDS,
        )
    except WebPushException as e:
        status = _status_of(e)
        if status in GONE_STATUS_CODES:
            logger.info("Push endpoint gone", extra={"status_code": status})
            raise PushGoneError(f"Push endpoint gone ({status})") from e
        logger.warning("Push delivery failed", extra={"status_code": status, "error": str(e)})
        raise PushError(f"Push delivery failed: {e}") from e

    logger.debug("Push sent", extra={"city": subscription.city})
