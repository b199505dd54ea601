from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from structlog import get_logger

logger = get_logger()


class ErrorResponse(HTTPException):
    """An error that is rendered to clients as ``{"success": false, "error": message}``."""

    default_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.default_status, detail=message)

    @property
    def message(self) -> str:
        return self.detail


class NotFound(ErrorResponse):
    default_status = status.HTTP_404_NOT_FOUND


class ValidationFailure(ErrorResponse):
    default_status = status.HTTP_400_BAD_REQUEST


class Unauthorized(ErrorResponse):
    default_status = status.HTTP_401_UNAUTHORIZED


class Forbidden(ErrorResponse):
    default_status = status.HTTP_403_FORBIDDEN


class DuplicateKeyError(Exception):
    """Raised by a store when a unique field already holds the value."""

    def __init__(self, field: str, value):
        super().__init__(f"Duplicate value for {field}: {value!r}")
        self.field = field
        self.value = value


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]), "msg": err["msg"]}
        for err in exc.errors()
    ]
    logger.info("Request validation failed", path=request.url.path, errors=errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"success": False, "errors": errors}),
    )


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    logger.warning("Duplicate key", path=request.url.path, field=exc.field)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "Duplicate field value entered"},
    )


async def server_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Server Error"},
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(Exception, server_error_handler)
