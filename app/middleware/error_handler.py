import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.exceptions import (
    CODE_INVALID_PARAMS,
    CODE_OPERATION_FAILED,
    ReportError,
    format_validation_errors,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI):
    @app.exception_handler(ReportError)
    async def report_error_handler(request: Request, exc: ReportError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "code": CODE_INVALID_PARAMS,
                "message": "Invalid parameters",
                "errors": format_validation_errors(exc.errors()),
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=400,
            content={"code": CODE_INVALID_PARAMS, "message": str(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        sentry_sdk.capture_exception(exc)
        return JSONResponse(
            status_code=500,
            content={
                "code": CODE_OPERATION_FAILED,
                "message": "Internal server error",
                "type": type(exc).__name__,
            },
        )
