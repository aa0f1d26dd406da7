"""
JSON response helpers shared by the API views.
"""

import json
from typing import Any, TypeVar

from django.http import HttpRequest, JsonResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

_M = TypeVar("_M", bound=BaseModel)


class ValidationErrorDetail(BaseModel):
    """Single validation error detail."""

    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    """Response for validation errors."""

    error: str = "validation_error"
    details: list[ValidationErrorDetail]


def cors_headers() -> dict[str, str]:
    """CORS headers for the browser client."""
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization, Idempotency-Key",
    }


def json_response(data: dict[str, Any], status: int = 200) -> JsonResponse:
    """Create a JSON response with CORS headers."""
    response = JsonResponse(data, status=status)
    for key, value in cors_headers().items():
        response[key] = value
    return response


def error_response(message: str, status: int = 400) -> JsonResponse:
    return json_response({"error": message}, status=status)


def validation_error_response(details: list[ValidationErrorDetail]) -> JsonResponse:
    response = ValidationErrorResponse(details=details)
    return json_response(response.model_dump(), status=400)


def parse_request(request: HttpRequest, model: type[_M]) -> _M | JsonResponse:
    """
    Parse and validate a JSON request body.

    Returns:
        The validated model, or a 400 response to return as-is.
    """
    try:
        body = json.loads(request.body or b"{}")
        return model.model_validate(body)
    except json.JSONDecodeError:
        return error_response("Invalid JSON in request body")
    except PydanticValidationError as e:
        return validation_error_response(
            [
                ValidationErrorDetail(
                    field=".".join(str(loc) for loc in err["loc"]),
                    message=err["msg"],
                )
                for err in e.errors()
            ]
        )
