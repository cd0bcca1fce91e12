"""API routes module - registers all route blueprints.

Route Organization:
- weather.py: Forecasts, place search, nearest city (3 routes)
- push.py: VAPID key and push subscriptions (3 routes)
- system.py: Version and health checks (3 routes)
- frontend.py: Static front-end and service worker (3 routes)
"""

from apiflask import APIFlask

from src.api.routes import frontend, push, system, weather


def register_blueprints(app: APIFlask) -> None:
    """Register all route blueprints with the app.

    The front-end blueprint goes last: its catch-all "/<path>" must not
    shadow the API.
    """
    app.register_blueprint(system.api)
    app.register_blueprint(weather.api)
    app.register_blueprint(push.api)
    app.register_blueprint(frontend.frontend)


__all__ = ["register_blueprints"]
