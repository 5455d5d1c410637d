"""Request body validation for Flask views.

@validate_request inspects a view's type hints. Each parameter annotated
with a pydantic model is filled from the request body (JSON, or form data
for HTML forms); other parameters (path params) pass through untouched.

    @bp.post("/register")
    @validate_request
    def register(data: RegisterInput):
        ...
"""

from functools import wraps
from typing import get_type_hints

from flask import request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError


def _model_params(f) -> dict[str, type[BaseModel]]:
    hints = get_type_hints(f)
    return {
        name: hint
        for name, hint in hints.items()
        if name != "return" and isinstance(hint, type) and issubclass(hint, BaseModel)
    }


def _request_payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None and request.form:
        payload = request.form.to_dict()

    if payload is None:
        raise ValidationError(
            "Request body is required",
            {"expected": "application/json"}
        )
    if not isinstance(payload, dict):
        raise ValidationError(
            "Request body must be a JSON object",
            {"received": type(payload).__name__}
        )
    return payload


def validate_request(f):
    """
    Decorator that parses and validates the request body.

    Raises:
        ValidationError: If the body is missing, not an object, or fails
            model validation. Details list the failing fields without
            echoing input values.
    """
    model_params = _model_params(f)

    @wraps(f)
    def wrapper(*args, **kwargs):
        if model_params:
            payload = _request_payload()
            for name, model in model_params.items():
                try:
                    kwargs[name] = model.model_validate(payload)
                except PydanticValidationError as e:
                    raise ValidationError(
                        "Request validation failed",
                        {
                            "errors": e.errors(
                                include_url=False,
                                include_context=False,
                                include_input=False,
                            )
                        }
                    ) from e
        return f(*args, **kwargs)

    return wrapper
