"""Static front-end: index page, assets and the service worker."""

from pathlib import Path

from flask import Blueprint, Response, send_from_directory

from src.api.rate_limiting import exempt_from_rate_limit
from src.config import Config

frontend = Blueprint("frontend", __name__)


def _static_dir() -> Path:
    return Path(Config.STATIC_DIR)


@frontend.route("/")
@exempt_from_rate_limit
def index() -> Response:
    return send_from_directory(_static_dir(), "index.html")


@frontend.route("/sw.js")
@exempt_from_rate_limit
def service_worker() -> Response:
    """Service worker, scoped to the whole site and never cached."""
    response = send_from_directory(_static_dir(), "sw.js", mimetype="application/javascript")
    response.headers["Service-Worker-Allowed"] = "/"
    response.headers["Cache-Control"] = "no-cache"
    return response


@frontend.route("/<path:path>")
@exempt_from_rate_limit
def static_files(path: str) -> Response:
    # send_from_directory refuses paths escaping the directory (404)
    return send_from_directory(_static_dir(), path)
