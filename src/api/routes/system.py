"""System routes: version and health checks."""

from typing import Any

from apiflask import APIBlueprint
from flask import current_app

from src.api.rate_limiting import exempt_from_rate_limit
from src.config import Config
from src.db.models import check_database_connectivity
from src.utils.logging import get_logger

logger = get_logger(__name__)

api = APIBlueprint("system", __name__, url_prefix="/api", tag="System")


@api.route("/version", methods=["GET"])
@exempt_from_rate_limit
def get_version() -> dict[str, Any]:
    """App version and which optional features are on."""
    return {
        "version": current_app.config.get("APP_VERSION"),
        "providers": Config.WEATHER_PROVIDERS,
        "push": Config.push_enabled(),
    }


@api.route("/health", methods=["GET"])
@exempt_from_rate_limit
def health_check() -> tuple[dict[str, Any], int]:
    """Liveness probe. Does not touch the database or upstream APIs."""
    return {
        "status": "ok",
        "version": current_app.config.get("APP_VERSION"),
    }, 200


@api.route("/ready", methods=["GET"])
@api.doc(responses=[503])
@exempt_from_rate_limit
def readiness_check() -> tuple[dict[str, Any], int]:
    """Readiness probe: 200 when the database is reachable, 503 otherwise."""
    checks: dict[str, dict[str, Any]] = {}

    db_ok, db_error = check_database_connectivity()
    checks["database"] = {
        "status": "ok" if db_ok else "error",
        "message": "Connected" if db_ok else db_error,
    }
    if not db_ok:
        logger.error("Readiness check failed: database", extra={"error": db_error})

    return {
        "status": "ready" if db_ok else "not_ready",
        "checks": checks,
        "version": current_app.config.get("APP_VERSION"),
    }, 200 if db_ok else 503
