"""Application errors and the handlers that turn them into `{message, cause}` bodies."""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    message = "ERROR"
    cause = "Internal Server Error"

    def __init__(self, cause: str | None = None, message: str | None = None):
        if cause is not None:
            self.cause = cause
        if message is not None:
            self.message = message
        super().__init__(self.cause)

    def to_dict(self) -> dict:
        return {"message": self.message, "cause": self.cause}


class DuplicateEmail(AppError):
    status_code = 409
    cause = "User already exists"


class NotFoundUser(AppError):
    status_code = 404
    cause = "User not found"


class NotFoundSession(AppError):
    status_code = 404
    cause = "Chat session not found"


class IncorrectPassword(AppError):
    status_code = 403
    cause = "Incorrect password"


class Unauthenticated(AppError):
    status_code = 401
    cause = "No authentication token provided"


class InvalidToken(AppError):
    """Raised by the token verifier; surfaced to callers as Unauthenticated."""

    status_code = 401
    cause = "Invalid token"


class ValidationError(AppError):
    status_code = 422


class UpstreamError(AppError):
    status_code = 500
    message = "Completion API call failed"


class UpstreamAuthError(UpstreamError):
    cause = "Invalid Gemini credentials. Check GEMINI_API_KEY in .env"


def _validation_cause(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Invalid value")
    return f"{loc}: {msg}" if loc else msg


def register_exception_handlers(app: FastAPI, *, expose_internals: bool) -> None:
    """Wire the taxonomy into the app. Stack traces only when `expose_internals`."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        err = ValidationError(_validation_cause(exc))
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled server error on %s %s", request.method, request.url.path)
        if expose_internals:
            return JSONResponse(
                status_code=500,
                content={
                    "message": "ERROR",
                    "cause": str(exc),
                    "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
                },
            )
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})
