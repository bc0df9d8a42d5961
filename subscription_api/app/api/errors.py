"""
Error handling for the API layer.

Every failed request is answered with the same envelope::

    {"success": false, "error": "<message>", "code": <http status>}

Domain errors carry their own status code.  Request validation errors
raised by FastAPI (malformed JSON, missing fields, non-numeric path
ids) become 400 responses.  Storage failures and unexpected exceptions
are logged with their traceback and answered with a generic 500 so
that no internal details reach the client.
"""

import logging
from typing import Any, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ..core.errors import InvalidJSONError, StorageError, SubscriptionAPIError
from ..schemas.subscription import ErrorResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "internal server error"


def error_response(message: str, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=message, code=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def describe_validation_errors(errors: Sequence[dict[str, Any]]) -> str:
    """Turn the first pydantic error into a short client-facing message."""
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = tuple(first.get("loc", ()))
    error_type = first.get("type", "")

    if error_type == "json_invalid" or loc == ("body",):
        return InvalidJSONError.default_message
    # A body value of the wrong JSON type, such as "price": true
    if loc and loc[0] == "body" and error_type.endswith("_type"):
        return InvalidJSONError.default_message
    if loc and loc[0] == "path":
        return "invalid subscription ID"

    field = str(loc[-1]) if len(loc) > 1 else "request"
    if error_type == "missing":
        return f"{field} is required"
    return f"invalid value for {field}: {first.get('msg', 'invalid input')}"


async def subscription_error_handler(request: Request, exc: SubscriptionAPIError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error(
            "Storage failure on %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
        return error_response(INTERNAL_ERROR_MESSAGE, exc.status_code)

    logger.warning(
        "Rejected %s %s: %s (%s)",
        request.method,
        request.url.path,
        exc.message,
        type(exc).__name__,
    )
    return error_response(exc.message, exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_errors(exc.errors())
    logger.warning("Invalid request on %s %s: %s", request.method, request.url.path, message)
    return error_response(message, status.HTTP_400_BAD_REQUEST)


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # Routing errors such as 404 for unknown paths and 405 for wrong methods
    return error_response(str(exc.detail), exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return error_response(INTERNAL_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SubscriptionAPIError, subscription_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
