"""Weather providers and the fallback chain across them."""

from typing import Any

from src.config import Config
from src.utils.logging import get_logger
from src.weather.geocoding import Location
from src.weather.providers.aemet import AemetProvider
from src.weather.providers.base import (
    AllProvidersFailedError,
    ProviderError,
    ProviderUnavailableError,
    WeatherProvider,
)
from src.weather.providers.openmeteo import OpenMeteoProvider
from src.weather.providers.weatherapi import WeatherApiProvider

logger = get_logger(__name__)

PROVIDERS: dict[str, type[WeatherProvider]] = {
    OpenMeteoProvider.name: OpenMeteoProvider,
    AemetProvider.name: AemetProvider,
    WeatherApiProvider.name: WeatherApiProvider,
}


def get_providers(names: list[str] | None = None) -> list[WeatherProvider]:
    """Instantiate providers in fallback order (default: Config.WEATHER_PROVIDERS)."""
    chain = []
    for name in names if names is not None else Config.WEATHER_PROVIDERS:
        provider_class = PROVIDERS.get(name)
        if provider_class is None:
            logger.warning("Unknown weather provider in chain", extra={"provider": name})
            continue
        chain.append(provider_class())
    return chain


def fetch_with_fallback(
    location: Location,
    providers: list[WeatherProvider] | None = None,
) -> tuple[str, dict[str, Any]]:
    """Try each provider in order until one returns a forecast.

    Returns:
        (source, document) from the first provider that succeeded

    Raises:
        AllProvidersFailedError: If every provider failed or none is configured
    """
    errors: dict[str, str] = {}
    for provider in providers if providers is not None else get_providers():
        if not provider.is_configured():
            logger.debug("Skipping unconfigured provider", extra={"provider": provider.name})
            errors[provider.name] = "not configured"
            continue
        try:
            document = provider.fetch_forecast(location)
        except ProviderUnavailableError as e:
            logger.info("Provider unavailable", extra={"provider": provider.name, "reason": str(e)})
            errors[provider.name] = str(e)
            continue
        except ProviderError as e:
            logger.warning(
                "Provider failed, trying next",
                extra={"provider": provider.name, "location_id": location.id, "error": str(e)},
            )
            errors[provider.name] = str(e)
            continue

        logger.info("Forecast fetched", extra={"provider": provider.name, "location_id": location.id})
        return provider.source, document

    logger.error("All weather providers failed", extra={"location_id": location.id, "errors": errors})
    raise AllProvidersFailedError(errors)


__all__ = [
    "PROVIDERS",
    "AemetProvider",
    "AllProvidersFailedError",
    "OpenMeteoProvider",
    "ProviderError",
    "ProviderUnavailableError",
    "WeatherApiProvider",
    "WeatherProvider",
    "fetch_with_fallback",
    "get_providers",
]
