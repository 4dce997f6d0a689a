"""
Application error taxonomy and the FastAPI handlers that render it.

Every error the API surfaces on purpose is an ``AppError`` subclass carrying
an HTTP status, a user-facing message and a stable machine code. Anything
else that escapes a handler is logged with its traceback and rendered as a
generic 500 so internal detail never reaches the caller.
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("errors")


class AppError(Exception):
    """Base class for errors that map to a fixed HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "server_error"
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message, "code": self.code}


class ConfigurationError(RuntimeError):
    """Server misconfiguration (e.g. missing JWT secret). Never user-recoverable."""


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    default_message = "Please fill in all required fields"


class DuplicateEmail(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "duplicate_email"
    default_message = "User already exists"


class InvalidCredentials(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class MissingToken(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "missing_token"
    default_message = "Access token required"


class InvalidToken(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "token_invalid"
    default_message = "Invalid token"


class TokenExpired(InvalidToken):
    code = "token_expired"
    default_message = "Token expired"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Access denied"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class UploadRejected(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "upload_rejected"
    default_message = "Upload rejected"


class ServerError(AppError):
    pass


# Codes that mean "the bearer token itself is no good"; clients drop their session on these.
TOKEN_FAILURE_CODES = frozenset({MissingToken.code, InvalidToken.code, TokenExpired.code})


# ============== FastAPI Handlers ==============


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, MissingToken) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


def describe_validation_errors(errors: list[dict[str, Any]]) -> str:
    """Turn pydantic error dicts into one readable line for the first problem."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "form"))
    msg = str(first.get("msg", "invalid value")).removeprefix("Value error, ")
    return f"{field}: {msg}" if field else msg


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = describe_validation_errors(errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": message,
            "code": ValidationError.code,
            "errors": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in errors
            ],
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error handlers to an application instance."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
