from __future__ import annotations

import time
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response
from structlog import contextvars as structlog_contextvars

from .config import settings
from .errors import NameGenerationError
from .logging import configure_logging, logger
from .models.name import describe_validation_errors
from .providers import shutdown_providers
from .routers import health, names


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit one structured log line per request with a request id.

    `request_id` は structlog の ContextVar に束縛し、リクエスト処理中の
    すべてのログへ自動付与する。
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:  # type: ignore[override]
        start = time.time()
        request_id = request.headers.get("x-request-id") or uuid4().hex
        request.state.request_id = request_id
        structlog_contextvars.clear_contextvars()
        structlog_contextvars.bind_contextvars(request_id=request_id)
        status_code: int | None = None
        error: Exception | None = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        except Exception as exc:
            error = exc
            status_code = 500
            raise
        finally:
            fields: dict[str, object] = {
                "path": request.url.path,
                "method": request.method,
                "status_code": status_code,
                "latency_ms": (time.time() - start) * 1000,
            }
            if error is not None:
                fields["error_type"] = type(error).__name__
                fields["error_message"] = str(error)[:200]
            logger.info("request_complete", **fields)
            structlog_contextvars.clear_contextvars()


async def _handle_generation_error(request: Request, exc: NameGenerationError) -> JSONResponse:
    logger.warning(
        "name_generation_error",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        detail=exc.detail,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_validation_errors(exc.errors())
    logger.info("request_validation_failed", path=request.url.path, message=message)
    return JSONResponse(status_code=400, content={"error": message})


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware and routers."""

    configure_logging()
    app = FastAPI(title="NameNest API", version="0.1.0")

    # 許可オリジン未設定時はワイルドカード（認証クッキー非許可）にフォールバック
    origins = list(settings.allowed_cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=bool(origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)

    app.add_exception_handler(NameGenerationError, _handle_generation_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]

    app.include_router(names.router, prefix="/api")
    app.include_router(health.router)

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        await shutdown_providers()

    return app


app = create_app()
