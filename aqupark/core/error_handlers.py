# aqupark/core/error_handlers.py

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from .exceptions import ShopError, ErrorCode
from .logging_config import get_logger

logger = get_logger(__name__)

def setup_error_handlers(app: FastAPI):
    """Register the JSON error handlers on the application."""

    @app.exception_handler(ShopError)
    async def shop_error_handler(request: Request, exc: ShopError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"{exc.code.value}: {exc.message}",
            exc_info=exc.__cause__ is not None,
            extra={
                'extra_fields': {
                    'error_code': exc.code.value,
                    'status_code': exc.status_code,
                    'context': exc.context,
                    'request_method': request.method,
                    'request_url': str(request.url),
                }
            }
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Malformed or missing input is user-correctable: 400, not 422
        errors = []
        for error in exc.errors():
            errors.append({
                "field": " -> ".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            })

        logger.warning(
            "Request validation failed",
            extra={'extra_fields': {'validation_errors': errors, 'request_url': str(request.url)}}
        )
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": "Request validation failed",
                    "details": errors
                }
            }
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error(
            f"Unhandled database error: {request.method} {request.url.path}",
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": ErrorCode.PERSISTENCE_ERROR.value,
                    "message": "Database operation failed"
                }
            }
        )
