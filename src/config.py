import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Base paths
    BASE_DIR = Path(__file__).parent.parent

    APP_NAME = "Aeris"
    APP_VERSION: str = os.getenv("APP_VERSION", "1.0")
    CONTACT_EMAIL: str = os.getenv("CONTACT_EMAIL", "admin@example.com")
    USER_AGENT: str = os.getenv("USER_AGENT", f"AerisApp/{APP_VERSION}")

    # Server
    PORT: int = int(os.getenv("PORT", "3000"))
    FLASK_ENV: str = os.getenv("FLASK_ENV", "development")

    # Static front-end (index.html, sw.js, icons)
    STATIC_DIR: Path = BASE_DIR / os.getenv("STATIC_DIR", "public")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Slow query logging (only active in development/debug mode)
    SLOW_QUERY_THRESHOLD_MS: int = int(os.getenv("SLOW_QUERY_THRESHOLD_MS", "100"))

    # Database
    DATABASE_PATH: Path = BASE_DIR / os.getenv("DATABASE_PATH", "aeris.db")

    # Weather providers, tried in order until one succeeds
    AVAILABLE_PROVIDERS = ("openmeteo", "aemet", "weatherapi")
    WEATHER_PROVIDERS: list[str] = [
        name.strip().lower()
        for name in os.getenv("WEATHER_PROVIDERS", "openmeteo,aemet,weatherapi").split(",")
        if name.strip()
    ]
    WEATHER_API_TIMEOUT: int = int(os.getenv("WEATHER_API_TIMEOUT", "10"))  # seconds
    AEMET_API_KEY: str = os.getenv("AEMET_API_KEY", "")
    WEATHERAPI_KEY: str = os.getenv("WEATHERAPI_KEY", "")
    # AEMET only covers Spanish municipalities; further than this from a known city we skip it
    AEMET_MAX_DISTANCE_KM: float = float(os.getenv("AEMET_MAX_DISTANCE_KM", "50"))

    # Geocoding
    GEOCODING_LANGUAGE: str = os.getenv("GEOCODING_LANGUAGE", "es")
    GEOCODING_TIMEOUT: int = int(os.getenv("GEOCODING_TIMEOUT", "5"))  # seconds

    # Weather cache
    WEATHER_CACHE_BACKEND: str = os.getenv("WEATHER_CACHE_BACKEND", "sqlite").lower()
    WEATHER_CACHE_TTL_SECONDS: int = int(os.getenv("WEATHER_CACHE_TTL_SECONDS", "300"))

    # Web Push (VAPID)
    VAPID_PUBLIC_KEY: str = os.getenv("VAPID_PUBLIC_KEY", "")
    VAPID_PRIVATE_KEY: str = os.getenv("VAPID_PRIVATE_KEY", "")
    VAPID_SUBJECT: str = os.getenv("VAPID_SUBJECT", f"mailto:{CONTACT_EMAIL}")
    PUSH_TTL_SECONDS: int = int(os.getenv("PUSH_TTL_SECONDS", "3600"))

    # Rain alerts
    NOTIFICATION_THROTTLE_SECONDS: int = int(os.getenv("NOTIFICATION_THROTTLE_SECONDS", "3600"))
    RAIN_ALERT_WINDOW_MINUTES: int = int(os.getenv("RAIN_ALERT_WINDOW_MINUTES", "60"))
    RAIN_ALERT_MIN_PRECIPITATION_MM: float = float(
        os.getenv("RAIN_ALERT_MIN_PRECIPITATION_MM", "0.1")
    )
    RAIN_ALERT_INTERVAL_SECONDS: int = int(
        os.getenv("RAIN_ALERT_INTERVAL_SECONDS", "600")
    )  # dev background loop only; production uses a systemd timer

    # Rate limiting
    RATE_LIMITING_ENABLED: bool = os.getenv("RATE_LIMITING_ENABLED", "true").lower() == "true"
    RATE_LIMIT_STORAGE_URI: str = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "200 per minute")
    RATE_LIMIT_WEATHER: str = os.getenv("RATE_LIMIT_WEATHER", "60 per minute")
    RATE_LIMIT_PUSH: str = os.getenv("RATE_LIMIT_PUSH", "10 per minute")

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development mode."""
        return cls.FLASK_ENV == "development"

    @classmethod
    def is_testing(cls) -> bool:
        """Check if running in testing mode."""
        return cls.FLASK_ENV == "testing"

    @classmethod
    def push_enabled(cls) -> bool:
        """Web Push needs both halves of the VAPID key pair."""
        return bool(cls.VAPID_PUBLIC_KEY and cls.VAPID_PRIVATE_KEY)

    @classmethod
    def unconfigured_providers(cls) -> list[str]:
        """Providers in the chain that lack an API key and will be skipped."""
        keys = {"aemet": cls.AEMET_API_KEY, "weatherapi": cls.WEATHERAPI_KEY}
        return [name for name in cls.WEATHER_PROVIDERS if name in keys and not keys[name]]

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration. Returns list of errors with clear guidance."""
        errors: list[str] = []

        if not cls.WEATHER_PROVIDERS:
            errors.append(
                "WEATHER_PROVIDERS must list at least one provider. "
                f"Valid providers: {', '.join(cls.AVAILABLE_PROVIDERS)}"
            )
        for provider in cls.WEATHER_PROVIDERS:
            if provider not in cls.AVAILABLE_PROVIDERS:
                errors.append(
                    f"Unknown weather provider '{provider}'. "
                    f"Valid providers: {', '.join(cls.AVAILABLE_PROVIDERS)}"
                )

        if bool(cls.VAPID_PUBLIC_KEY) != bool(cls.VAPID_PRIVATE_KEY):
            errors.append(
                "VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY must be set together. "
                "Generate a pair with: vapid --gen"
            )

        # Validate numeric ranges
        if cls.PORT < 1 or cls.PORT > 65535:
            errors.append(f"PORT must be between 1 and 65535, got {cls.PORT}")

        if cls.WEATHER_CACHE_TTL_SECONDS < 1:
            errors.append(
                f"WEATHER_CACHE_TTL_SECONDS must be positive, got {cls.WEATHER_CACHE_TTL_SECONDS}"
            )

        if cls.WEATHER_CACHE_BACKEND not in {"sqlite", "memory"}:
            errors.append(
                f"WEATHER_CACHE_BACKEND '{cls.WEATHER_CACHE_BACKEND}' is not valid. "
                "Valid backends: memory, sqlite"
            )

        if cls.NOTIFICATION_THROTTLE_SECONDS < 0:
            errors.append(
                "NOTIFICATION_THROTTLE_SECONDS must not be negative, "
                f"got {cls.NOTIFICATION_THROTTLE_SECONDS}"
            )

        # Validate log level
        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if cls.LOG_LEVEL not in valid_log_levels:
            errors.append(
                f"LOG_LEVEL '{cls.LOG_LEVEL}' is not valid. "
                f"Valid levels: {', '.join(sorted(valid_log_levels))}"
            )

        return errors
