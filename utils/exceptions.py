"""
Custom exceptions and error handlers for the application.
Every error is rendered in the shared envelope ``{"success": false, "message": ...}``.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from bson.errors import InvalidId
from pydantic import ValidationError
import logging

logger = logging.getLogger(__name__)


class APIException(Exception):
    """Base API exception class."""
    def __init__(self, message: str, status_code: int = 500, error_code: str = None):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or f"ERR_{status_code}"
        super().__init__(self.message)

    def to_content(self) -> dict:
        return {
            "success": False,
            "message": self.message,
            "error_code": self.error_code,
        }


class NotFoundException(APIException):
    """Resource not found exception."""
    def __init__(self, resource: str, resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message += f": {resource_id}"
        super().__init__(message, status_code=404, error_code="NOT_FOUND")


class ValidationException(APIException):
    """Validation exception carrying a list of field/message pairs."""
    def __init__(self, message: str, errors: list = None):
        super().__init__(message, status_code=400, error_code="VALIDATION_ERROR")
        self.errors = errors or []

    def to_content(self) -> dict:
        content = super().to_content()
        content["errors"] = self.errors
        return content


class UnauthorizedException(APIException):
    """Unauthorized access exception."""
    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message, status_code=401, error_code="UNAUTHORIZED")


class ForbiddenException(APIException):
    """Forbidden access exception."""
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403, error_code="FORBIDDEN")


class ConflictException(APIException):
    """State conflict, e.g. duplicate keys or lost concurrent updates."""
    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(message, status_code=409, error_code=error_code)


class RegistrationRejectedException(APIException):
    """An event refused a registration for a business reason."""
    def __init__(self, reason: str, message: str):
        super().__init__(message, status_code=400, error_code=reason.upper().replace("-", "_"))
        self.reason = reason

    def to_content(self) -> dict:
        content = super().to_content()
        content["reason"] = self.reason
        return content


def format_validation_errors(errors: list) -> list:
    """Flatten pydantic error dicts into ``[{"field": ..., "message": ...}]``."""
    details = []
    for error in errors:
        field = ".".join(str(loc) for loc in error["loc"] if loc not in ("body", "query", "path"))
        details.append({"field": field, "message": error["msg"]})
    return details


async def api_exception_handler(request: Request, exc: APIException):
    """Handle API exceptions."""
    logger.warning(f"API Exception: {exc.message} (Code: {exc.error_code}, Status: {exc.status_code})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    error_details = format_validation_errors(exc.errors())

    logger.warning(f"Validation error: {error_details}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Validation error",
            "error_code": "VALIDATION_ERROR",
            "errors": error_details
        }
    )


async def model_validation_exception_handler(request: Request, exc: ValidationError):
    """Handle validation errors raised while re-validating merged records."""
    error_details = format_validation_errors(exc.errors())

    logger.warning(f"Record validation error: {error_details}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Validation error",
            "error_code": "VALIDATION_ERROR",
            "errors": error_details
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    logger.warning(f"HTTP Exception: {exc.detail} (Status: {exc.status_code})")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.detail,
            "error_code": f"HTTP_{exc.status_code}",
        },
        headers=getattr(exc, "headers", None),
    )


async def invalid_id_handler(request: Request, exc: InvalidId):
    """Handle invalid MongoDB ObjectId errors."""
    logger.warning(f"Invalid ObjectId: {exc}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Invalid ID format",
            "error_code": "INVALID_ID",
        }
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled exception: {type(exc).__name__}: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "error_code": "INTERNAL_ERROR",
        }
    )
