"""FastAPI app factory, health endpoint and the uvicorn entry point.

Serve with `recaptcha-relay`, or `uvicorn --factory recaptcha_relay.main:create_app`.
"""
from __future__ import annotations

import time
from collections.abc import Callable
from typing import Optional
from uuid import uuid4

import httpx
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import router as api_router
from .api.models import ErrorResponse, HealthResponse
from .config import Settings, load_settings
from .domain.errors import MissingTokenError
from .logging_conf import get_logger, setup_logging
from .service import VerificationRelay, build_client

setup_logging()
logger = get_logger("app")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the relay app.

    `settings` defaults to load_settings(); `transport` is handed to the
    upstream httpx client (tests pass a MockTransport).
    """
    settings = settings or load_settings()

    app = FastAPI(title="reCAPTCHA Verification API", version=__version__)
    app.state.settings = settings
    app.state.relay = VerificationRelay(settings, build_client(settings, transport))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _on_startup() -> None:
        base = f"http://localhost:{settings.port}"
        logger.info(
            "startup",
            extra={
                "event": "startup",
                "variant": settings.variant.value,
                "port": settings.port,
                "health_url": f"{base}/health",
                "verify_url": f"{base}/api/verify-recaptcha",
            },
        )

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        logger.info("shutdown", extra={"event": "shutdown"})

    @app.middleware("http")
    async def request_logger(request: Request, call_next: Callable[[Request], Response]):
        """Log start/end of every request under a correlation id.

        X-Request-ID is taken from the request when present, minted otherwise,
        and echoed on the response.
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.info(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            body = ErrorResponse(
                message="Verification failed due to server error", error="internal_error"
            )
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump()
            )
        elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Unparseable JSON or a non-string token: same answer as a missing token.
        body = ErrorResponse(
            message=MissingTokenError.public_message, error="invalid_request"
        )
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump())

    @app.get("/health", response_model=HealthResponse, summary="Liveness check")
    async def health() -> HealthResponse:
        return HealthResponse()

    app.include_router(api_router)

    return app


def run() -> None:
    """Console entry point: serve the relay with uvicorn."""
    import uvicorn

    settings = load_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
