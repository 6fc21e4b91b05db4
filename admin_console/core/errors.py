"""
Domain error taxonomy and its HTTP rendering
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for every failure raised by the lifecycle engine"""

    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code


class UnauthorizedError(AppError):
    """Caller lacks the capability, or does not own the resource"""
    code = "unauthorized"
    status_code = 403


class NotFoundError(AppError):
    code = "not_found"
    status_code = 404


class ValidationError(AppError):
    """Input is well-formed but not acceptable (type mismatch, missing parameter)"""
    code = "validation_error"
    status_code = 400


class InvariantViolation(AppError):
    """The request would break a structural invariant of the store"""
    code = "invariant_violation"
    status_code = 409


def error_payload(exc: AppError) -> dict:
    return {"error": exc.message, "code": exc.code}


async def app_error_handler(request: Request, exc: AppError):
    """Render domain errors raised by services"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"Request rejected: {exc.code}: {exc.message}", path=request.url.path)
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))
