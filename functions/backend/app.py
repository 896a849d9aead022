"""
FastAPI application entry point for the Sponta API.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.config import get_settings
from backend.responses import error_body
from backend.routes import router
from shared.errors import AppError
from shared.time_utils import utc_now

logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    # Drop the leading "body"/"query" marker FastAPI puts on each location.
    return ".".join(str(part) for part in loc[1:]) or str(loc[0])


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", exc.name, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(error_body(exc.name, exc.message, exc.errors)),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"field": _field_name(error["loc"]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=error_body("ValidationError", "Validation failed", errors),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            content = {
                "success": False,
                "error": "Not Found",
                "message": f"Route {request.url.path} not found",
            }
        else:
            content = error_body("HTTPException", str(exc.detail))
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body("InternalServerError", "Internal server error"),
        )


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title="Sponta API", version="1.0.0")
    register_exception_handlers(app)

    @app.get("/health")
    def health():
        return {
            "status": "OK",
            "message": "SPONTA API is running",
            "timestamp": utc_now().isoformat(),
        }

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
