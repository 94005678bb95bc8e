from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError
import logging

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """
    Base class for every failure a handler reports to the client.

    Rendered as `{"success": false, "message": ..., "error": ...}` with
    `status_code` by the handlers registered in `register_exception_handlers`.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error: str | None = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_content(self) -> dict:
        content = {"success": False, "message": self.message}
        if self.error:
            content["error"] = self.error
        return content


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED

class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN

class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND

class InvalidInput(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST

class InvalidOperation(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST

class QuotaExceeded(InvalidOperation):
    pass

class Conflict(ServiceError):
    status_code = status.HTTP_409_CONFLICT

class Internal(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def format_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=InvalidInput(format_validation_error(exc)).to_content()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=Internal("Database error", exc.__class__.__name__).to_content()
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unexpected error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=Internal("Internal server error", exc.__class__.__name__).to_content()
        )
