"""Error taxonomy and the FastAPI handlers that turn it into JSON responses."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from notekeeper.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong!"


class AppError(Exception):
    """Base for errors that are safe to report to the client as-is."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str, headers: dict[str, str] | None = None) -> None:
        self.message = message
        self.headers = headers
        super().__init__(message)

    @property
    def status(self) -> str:
        """'fail' for client errors, 'error' for server errors."""
        return "fail" if 400 <= self.status_code < 500 else "error"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "code": self.code, "message": self.message}


class ValidationError(AppError):
    """One or more request fields are invalid. Lists every failing field."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"

    def __init__(self, errors: list[dict[str, str]], message: str = "Validation failed") -> None:
        self.errors = errors
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls([{"field": field, "message": message}], message=message)

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class ConflictError(AppError):
    """A uniqueness rule (email, username, external id) would be violated."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "conflict"


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_failed"

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppError):
    """Identity is valid but its role is not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"

    def __init__(self, message: str = "Forbidden - Insufficient permissions") -> None:
        super().__init__(message)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class UnexpectedError(AppError):
    """Failure not classified above; the message is always the generic one."""

    def __init__(self, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(GENERIC_ERROR_MESSAGE)


class ServiceUnavailableError(AppError):
    """A required external collaborator (e.g. the OAuth provider) is not configured."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "service_unavailable"


def _field_name(loc: tuple[Any, ...] | list[Any]) -> str:
    # Drop the leading "body"/"query"/"path" segment FastAPI puts in front.
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts)


def _validation_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    errors = []
    for err in exc.errors():
        message = str(err.get("msg", "Invalid value"))
        # pydantic prefixes messages raised from validators with "Value error, "
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": _field_name(err.get("loc", ())), "message": message})
    return errors


def _request_settings(request: Request) -> Settings:
    # Honour dependency_overrides the same way Depends(get_settings) does.
    provider = request.app.dependency_overrides.get(get_settings, get_settings)
    return provider()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, UnexpectedError) and exc.cause is not None:
        logger.error(
            "Unexpected error",
            exc_info=exc.cause,
            extra={"path": request.url.path, "method": request.method},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = ValidationError(_validation_errors(exc))
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"path": request.url.path, "method": request.method},
    )
    body: dict[str, Any] = {
        "status": "error",
        "code": UnexpectedError.code,
        "message": GENERIC_ERROR_MESSAGE,
    }
    settings = _request_settings(request)
    if settings.DEBUG and settings.APP_ENV == "dev":
        body["detail"] = repr(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Install the central handlers on the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
