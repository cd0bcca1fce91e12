"""HTTP access to third-party weather and geocoding APIs.

Every outbound call goes through get_json() so they all send the same
identifying User-Agent (Nominatim and AEMET reject anonymous clients), use a
timeout, and fail the same way.
"""

from typing import Any

import requests

from src.config import Config
from src.utils.logging import get_logger

logger = get_logger(__name__)


def default_headers() -> dict[str, str]:
    return {
        "User-Agent": f"{Config.USER_AGENT} (contact: {Config.CONTACT_EMAIL})",
        "Accept": "application/json",
    }


def get_json(
    url: str,
    params: dict[str, Any] | None = None,
    *,
    service: str,
    timeout: float | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """GET a JSON document.

    Args:
        url: Endpoint URL
        params: Query parameters
        service: Short upstream name used in logs and error messages
        timeout: Seconds; defaults to Config.WEATHER_API_TIMEOUT
        headers: Extra headers merged over the defaults

    Returns:
        The decoded JSON body

    Raises:
        requests.RequestException: On connection errors or HTTP status >= 400
        ValueError: If the body is not valid JSON
    """
    merged_headers = default_headers()
    if headers:
        merged_headers.update(headers)

    response = requests.get(
        url,
        params=params,
        headers=merged_headers,
        timeout=timeout or Config.WEATHER_API_TIMEOUT,
    )

    if response.status_code >= 400:
        logger.warning(
            f"{service} API error",
            extra={"service": service, "status_code": response.status_code},
        )
        raise requests.RequestException(f"{service} API error ({response.status_code})")

    return response.json()
