"""Rate limiting for API endpoints.

Uses Flask-Limiter, keyed by client IP (the API has no accounts). Storage is
configurable (memory://, redis://...). The limiter exists at import time so
route decorators can attach limits; init_rate_limiting() binds it to the app.
"""

import re
from collections.abc import Callable
from typing import Any

from flask import Flask, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from src.api.errors import rate_limited_error
from src.config import Config
from src.utils.logging import get_logger

logger = get_logger(__name__)


def get_rate_limit_key() -> str:
    """Rate limit key for the current request (per client IP)."""
    return f"ip:{get_remote_address()}"


limiter = Limiter(
    get_rate_limit_key,
    storage_uri=Config.RATE_LIMIT_STORAGE_URI,
    # Default limits apply to all endpoints not explicitly decorated
    default_limits=[Config.RATE_LIMIT_DEFAULT],
    headers_enabled=True,
    strategy="fixed-window",
    enabled=Config.RATE_LIMITING_ENABLED,
)


def init_rate_limiting(app: Flask) -> Limiter:
    """Bind the limiter to the app and render 429s in the standard format."""
    limiter.init_app(app)

    @app.errorhandler(429)
    def rate_limit_handler(e: Exception) -> tuple[dict[str, Any], int, dict[str, str]]:
        retry_after = None
        match = re.search(r"(\d+)\s*second", str(getattr(e, "description", "")))
        if match:
            retry_after = int(match.group(1))

        logger.warning(
            "Rate limit exceeded",
            extra={
                "key": get_rate_limit_key(),
                "path": request.path,
                "method": request.method,
                "retry_after": retry_after,
            },
        )

        body, status = rate_limited_error(retry_after)
        headers = {"Retry-After": str(retry_after)} if retry_after else {}
        return body, status, headers

    if Config.RATE_LIMITING_ENABLED:
        logger.info(
            "Rate limiting initialized",
            extra={
                "storage_uri": Config.RATE_LIMIT_STORAGE_URI,
                "default_limit": Config.RATE_LIMIT_DEFAULT,
            },
        )
    else:
        logger.info("Rate limiting is disabled")

    return limiter


# ============================================================================
# Rate limit decorators per endpoint category
# ============================================================================


def rate_limit_weather(f: Callable[..., Any]) -> Callable[..., Any]:
    """Weather and search endpoints (each miss costs upstream API calls)."""
    return limiter.limit(Config.RATE_LIMIT_WEATHER)(f)


def rate_limit_push(f: Callable[..., Any]) -> Callable[..., Any]:
    """Push subscription endpoints (stricter)."""
    return limiter.limit(Config.RATE_LIMIT_PUSH)(f)


def exempt_from_rate_limit(f: Callable[..., Any]) -> Callable[..., Any]:
    """Exempt an endpoint (health, version, static files)."""
    return limiter.exempt(f)
