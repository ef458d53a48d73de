"""
FastAPI application for the LocalSearch HTTP API.

Validation failures answer 400 with structured details, LocalSearch errors
answer with their own status code and message, and anything unexpected is
logged and answered with a generic 500.
"""

import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, get_settings
from utils.io.errors import LocalSearchError
from utils.io.logger import logger
from utils.metrics import MetricsCollector

from . import __version__
from .routes import router

# Metrics bucket for paths that match no route
UNMATCHED_ENDPOINT = "<unmatched>"


def _endpoint_key(request: Request) -> str:
    path = request.url.path
    known = {getattr(route, "path", None) for route in request.app.routes}
    return path if path in known else UNMATCHED_ENDPOINT


def create_app(
    settings: Optional[Settings] = None, metrics: Optional[MetricsCollector] = None
) -> FastAPI:
    """Build the API. Raises ConfigurationError when no repository roots are configured."""
    settings = settings or get_settings()
    roots = settings.require_roots()

    app = FastAPI(title="LocalSearch API", version=__version__)
    app.state.settings = settings
    app.state.roots = roots
    app.state.metrics = metrics or MetricsCollector()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

    def _record(request: Request, status_code: int, started: float) -> None:
        duration = (time.perf_counter() - started) * 1000
        request.app.state.metrics.record_request(_endpoint_key(request), status_code)
        logger.info(f"{request.method} {request.url.path} {status_code} {duration:.0f}ms")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # answered with 500 by the outermost error handler
            _record(request, 500, started)
            raise
        _record(request, response.status_code, started)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Validation error",
                "details": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(LocalSearchError)
    async def localsearch_error_handler(request: Request, exc: LocalSearchError):
        logger.error(f"{request.url.path} failed", detail=str(exc))
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": str(exc), "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}", detail=repr(exc))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
        )

    app.include_router(router)

    logger.info(f"Configured repository roots: {', '.join(roots)}")
    return app
