"""
Application factory - builds FastAPI app with all middleware and routes.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from markprint import __version__
from markprint.config import Settings, get_settings, init_settings
from markprint.modules.health.router import router as health_router
from markprint.modules.markdown.router import router as markdown_router
from markprint.modules.pdf.router import router as pdf_router
from markprint.modules.pdf.service import shutdown_coordinator
from markprint.modules.themes.router import router as themes_router
from markprint.modules.upload.router import router as upload_router
from markprint.shared.errors import MarkPrintError, ValidationFailedError
from markprint.shared.ids import generate_request_id
from markprint.shared.logging import (
    clear_request_context,
    get_logger,
    get_request_context,
    set_request_context,
    setup_logging,
)
from markprint.shared.types import RequestContext

logger = get_logger(__name__)

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "script-src 'self'",
    "style-src 'self' 'unsafe-inline'",
    "img-src 'self' data: https:",
    "font-src 'self'",
    "connect-src 'self'",
    "frame-src 'none'",
    "object-src 'none'",
    "base-uri 'self'",
    "form-action 'self'",
])

SECURITY_HEADERS = {
    "Content-Security-Policy": CONTENT_SECURITY_POLICY,
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
}

# Swagger UI and ReDoc load their assets from a CDN
DOCS_PATHS = ("/docs", "/redoc")
DOCS_SECURITY_HEADERS = {
    name: value for name, value in SECURITY_HEADERS.items() if name != "Content-Security-Policy"
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()

    setup_logging(settings.log_level)
    logger.info(f"Starting MarkPrint {__version__} ({settings.environment})")
    logger.info(
        f"PDF concurrency limit {settings.pdf_concurrency_limit}, "
        f"timeout {settings.pdf_timeout_ms}ms"
    )

    yield

    # Close the browser before the listener goes away so no Chromium is orphaned
    logger.info("Shutting down MarkPrint...")
    await shutdown_coordinator()
    logger.info("MarkPrint stopped")


def _error_response(exc: MarkPrintError) -> JSONResponse:
    ctx = get_request_context()
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "error": exc.to_dict(),
            "request_id": ctx.request_id if ctx else None,
        },
    )


def build_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Optional settings override (useful for testing)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()
    else:
        init_settings(settings)

    app = FastAPI(
        title="MarkPrint",
        description="Markdown to printable HTML and PDF",
        version=__version__,
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Request context middleware
    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Response:
        """Attach request context for logging and set security headers."""
        ctx = RequestContext(
            request_id=request.headers.get("X-Request-ID", generate_request_id()),
            path=request.url.path,
            method=request.method,
        )
        set_request_context(ctx)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = ctx.request_id
            headers = DOCS_SECURITY_HEADERS if ctx.path.startswith(DOCS_PATHS) else SECURITY_HEADERS
            for name, value in headers.items():
                response.headers.setdefault(name, value)
            return response
        finally:
            clear_request_context()

    @app.exception_handler(MarkPrintError)
    async def markprint_error_handler(request: Request, exc: MarkPrintError) -> JSONResponse:
        """Handle MarkPrintError with consistent JSON response."""
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report schema violations as 400 with per-field messages."""
        fields: dict[str, list[str]] = {}
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ()) if part != "body"]
            fields.setdefault(".".join(loc) or "body", []).append(error.get("msg", "invalid"))

        logger.warning(f"Request validation failed: {fields}")
        return _error_response(ValidationFailedError("Validation failed", details=fields))

    # API routers
    app.include_router(health_router)
    app.include_router(themes_router)
    app.include_router(markdown_router)
    app.include_router(pdf_router)
    app.include_router(upload_router)

    # Client bundle and theme stylesheets; registered last so /api wins
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app
