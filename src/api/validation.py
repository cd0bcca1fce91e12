"""Request validation with Pydantic.

validate_request() checks a JSON body against a schema and hands the route
the validated model; failures come back in the standard error format.
"""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from flask import request
from pydantic import BaseModel, ValidationError

from src.api.errors import invalid_json_error, validation_error
from src.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


def pydantic_to_error_response(error: ValidationError) -> tuple[dict[str, Any], int]:
    """Convert the first Pydantic error into a VALIDATION_ERROR response.

    The dotted location ("subscription.keys.auth") becomes details.field.
    """
    first_error = error.errors()[0]

    loc = first_error.get("loc", ())
    field = ".".join(str(x) for x in loc) if loc else None

    message = first_error.get("msg", "Invalid input")
    # Custom validators raise ValueError; Pydantic prefixes their message
    message = message.removeprefix("Value error, ")

    logger.debug(
        "Request validation failed",
        extra={"field": field, "error_message": message, "error_count": len(error.errors())},
    )
    return validation_error(message, field=field)


def validate_request(
    schema_class: type[T],
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator that validates the request JSON against a Pydantic schema.

    Usage:
        @api.route("/push/subscribe", methods=["POST"])
        @validate_request(SubscribeRequest)
        def subscribe(data: SubscribeRequest) -> ...:
            ...

    The validated model is passed as the first positional argument. A body
    that is not a JSON object yields INVALID_FORMAT; a schema mismatch yields
    VALIDATION_ERROR.
    """

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(f)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                return invalid_json_error()

            try:
                validated = schema_class.model_validate(data)
            except ValidationError as e:
                return pydantic_to_error_response(e)

            return f(validated, *args, **kwargs)

        return wrapper

    return decorator
