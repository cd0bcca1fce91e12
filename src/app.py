import sys
import uuid

from apiflask import APIFlask
from flask import Response, g, request

from src.api.errors import register_error_handlers
from src.api.rate_limiting import init_rate_limiting
from src.api.routes import register_blueprints
from src.config import Config
from src.notifications.scheduler import start_dev_scheduler
from src.utils.logging import get_logger, set_request_id, setup_logging


def create_app() -> APIFlask:
    """Create and configure the application."""
    # Setup structured logging first
    setup_logging()
    logger = get_logger(__name__)

    app = APIFlask(
        __name__,
        title=f"{Config.APP_NAME} API",
        version=Config.APP_VERSION,
        static_folder=None,
    )
    app.config["APP_VERSION"] = Config.APP_VERSION
    app.json.ensure_ascii = False  # type: ignore[attr-defined]

    # Request ID middleware - must be before blueprints
    @app.before_request
    def add_request_id() -> None:
        """Generate and store request ID for correlation."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(request_id)
        g.request_id = request_id

    @app.before_request
    def log_request() -> None:
        logger.info(
            "Incoming request",
            extra={
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
                "user_agent": request.headers.get("User-Agent", ""),
            },
        )

    @app.after_request
    def log_response(response: Response) -> Response:
        logger.info(
            "Outgoing response",
            extra={
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
                "content_length": response.content_length,
            },
        )
        request_id = g.get("request_id")
        if request_id:
            response.headers["X-Request-ID"] = request_id
        return response

    init_rate_limiting(app)
    register_error_handlers(app)
    register_blueprints(app)

    if start_dev_scheduler():
        logger.info("Rain alert scheduler started (development)")

    logger.info(
        "App created",
        extra={
            "environment": Config.FLASK_ENV,
            "log_level": Config.LOG_LEVEL,
            "providers": Config.WEATHER_PROVIDERS,
            "cache_backend": Config.WEATHER_CACHE_BACKEND,
        },
    )
    return app


def main() -> None:
    """Main entry point."""
    setup_logging()
    logger = get_logger(__name__)

    errors = Config.validate()
    if errors:
        logger.error("Configuration validation failed", extra={"errors": errors})
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        sys.exit(1)

    skipped = Config.unconfigured_providers()
    if skipped:
        logger.warning("Weather providers without API keys will be skipped", extra={"providers": skipped})
    if not Config.push_enabled():
        logger.warning("VAPID keys not set: push notifications disabled")

    app = create_app()
    logger.info(
        f"Starting {Config.APP_NAME}",
        extra={
            "port": Config.PORT,
            "environment": Config.FLASK_ENV,
            "log_level": Config.LOG_LEVEL,
        },
    )
    # The reloader would start the rain alert thread twice
    app.run(host="0.0.0.0", port=Config.PORT, debug=Config.is_development(), use_reloader=False)


if __name__ == "__main__":
    main()
