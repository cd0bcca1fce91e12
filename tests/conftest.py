"""Shared pytest fixtures for Aeris tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock, patch

import pytest
import requests
from flask import Flask
from flask.testing import FlaskClient

if TYPE_CHECKING:
    from src.db.models import Database

# Set test environment variables before importing app modules
_session_dir = tempfile.mkdtemp(prefix="aeris-tests-")
os.environ["FLASK_ENV"] = "testing"
os.environ["DATABASE_PATH"] = str(Path(_session_dir) / "import-time.db")
os.environ["RATE_LIMITING_ENABLED"] = "false"
os.environ["WEATHER_CACHE_BACKEND"] = "sqlite"
os.environ["WEATHER_PROVIDERS"] = "openmeteo,aemet,weatherapi"
os.environ["AEMET_API_KEY"] = ""
os.environ["WEATHERAPI_KEY"] = ""
os.environ["VAPID_PUBLIC_KEY"] = "test-vapid-public-key"
os.environ["VAPID_PRIVATE_KEY"] = "test-vapid-private-key"
os.environ["VAPID_SUBJECT"] = "mailto:test@example.com"


# -----------------------------------------------------------------------------
# Database fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def temp_db_dir() -> Generator[Path]:
    """Create a temporary directory for test databases."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_db_path(temp_db_dir: Path, request: pytest.FixtureRequest) -> Path:
    """Create unique database path for each test."""
    test_name = request.node.name.replace("[", "_").replace("]", "_").replace("/", "_")
    return temp_db_dir / f"{test_name}.db"


@pytest.fixture
def test_database(test_db_path: Path) -> Generator[Database]:
    """Create isolated test database for each test."""
    from src.db.models import Database

    db = Database(db_path=test_db_path)
    yield db
    db.close()


@pytest.fixture(autouse=True)
def clear_memory_cache() -> Generator[None]:
    """Start every test with an empty in-process weather cache."""
    from src.weather.cache import memory_cache

    memory_cache.clear()
    yield
    memory_cache.clear()


# -----------------------------------------------------------------------------
# Flask app fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def app(test_database: Database) -> Generator[Flask]:
    """Create test application backed by the isolated test database."""
    with patch("src.db.models.db", test_database):
        with patch("src.api.routes.push.db", test_database):
            with patch("src.notifications.rain_alerts.db", test_database):
                from src.app import create_app

                flask_app = create_app()
                flask_app.config["TESTING"] = True
                yield flask_app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create Flask test client."""
    return app.test_client()


@pytest.fixture
def static_dir(tmp_path: Path) -> Generator[Path]:
    """A throwaway front-end directory served by the static routes."""
    (tmp_path / "index.html").write_text("<!doctype html><title>Aeris</title>", encoding="utf-8")
    (tmp_path / "sw.js").write_text("self.addEventListener('push', () => {});", encoding="utf-8")
    (tmp_path / "app.css").write_text("body { margin: 0; }", encoding="utf-8")
    with patch("src.config.Config.STATIC_DIR", tmp_path):
        yield tmp_path


# -----------------------------------------------------------------------------
# Mock fixtures for external services
# -----------------------------------------------------------------------------


class UpstreamMock:
    """Routes mocked requests.get calls by URL prefix.

    A route maps to a JSON payload, or to an int for an error status. URLs
    without a route raise ConnectionError, like an unreachable host.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def add(self, url_prefix: str, payload: Any) -> None:
        self.routes[url_prefix] = payload

    def called(self, url_prefix: str) -> int:
        return sum(1 for url, _ in self.calls if url.startswith(url_prefix))

    def params_for(self, url_prefix: str) -> list[dict[str, Any]]:
        return [params for url, params in self.calls if url.startswith(url_prefix)]

    def __call__(self, url: str, params: dict[str, Any] | None = None, **kwargs: Any) -> MagicMock:
        self.calls.append((url, params or {}))
        matches = [prefix for prefix in self.routes if url.startswith(prefix)]
        if not matches:
            raise requests.ConnectionError(f"No route for {url}")

        payload = self.routes[max(matches, key=len)]
        response = MagicMock()
        if isinstance(payload, int):
            response.status_code = payload
            response.json.return_value = {"error": True}
        else:
            response.status_code = 200
            response.json.return_value = payload
        return response


@pytest.fixture
def upstream() -> Generator[UpstreamMock]:
    """Mock every outbound HTTP call made through src.weather.upstream."""
    mock = UpstreamMock()
    with patch("src.weather.upstream.requests.get", side_effect=mock):
        yield mock


@pytest.fixture
def mock_webpush() -> Generator[MagicMock]:
    """Mock pywebpush delivery."""
    with patch("src.notifications.push.webpush") as mock:
        yield mock
