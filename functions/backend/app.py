"""
FastAPI application entry point for the feedback triage backend.

Failures in the handlers are reported uniformly as `{"error": message}`,
with status 500 unless the error type says otherwise.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from backend.config import get_settings
from backend.routes import JOB_PATHS, router
from models.gemini import GeminiApiError, GeminiConfigurationError, GeminiInvalidResponseException
from triage.errors import TriageError

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _triage_error_handler(request: Request, exc: TriageError) -> JSONResponse:
    logger.error("Error in %s: %s", request.url.path, exc)
    return _error_response(exc.status_code, str(exc))


async def _vendor_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Error in %s: %s", request.url.path, exc)
    return _error_response(500, str(exc))


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turns any exception that escapes the routes into a 500 `{"error"}`.

    Added before `CORSMiddleware` so these responses still carry CORS headers.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error in %s", request.url.path)
            return _error_response(500, str(exc) or exc.__class__.__name__)


def _make_validation_handler(prefix: str):
    job_paths = {f"{prefix}{path}" for path in JOB_PATHS}

    async def handler(request: Request, exc: RequestValidationError):
        if request.url.path in job_paths:
            logger.error("Invalid request body for %s: %s", request.url.path, exc)
            return _error_response(500, "Invalid request body")
        return await request_validation_exception_handler(request, exc)

    return handler


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Feedback Triage Backend (FastAPI)", version="0.1.0")
    # Middleware added later wraps middleware added earlier.
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    app.add_exception_handler(TriageError, _triage_error_handler)
    for exc_type in (
        GeminiConfigurationError,
        GeminiApiError,
        GeminiInvalidResponseException,
    ):
        app.add_exception_handler(exc_type, _vendor_error_handler)
    app.add_exception_handler(
        RequestValidationError, _make_validation_handler(settings.api_prefix)
    )
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
