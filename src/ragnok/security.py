"""
ragnok.security — HTTP glue: logging, request IDs, CORS, rate limiting, error handlers.

Used by ragnok.api; nothing in the verification core imports this module.
"""

import logging
import os
import time
import uuid
from contextvars import ContextVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from ragnok.config import DEFAULT_RATE_LIMIT, Settings

# ─── Context var for request ID ────────────────────────────────────

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


# ─── Structured JSON logging ──────────────────────────────────────

class RequestIdFilter(logging.Filter):
    def filter(self, record):
        record.request_id = request_id_var.get("")
        return True


def setup_structured_logging(level: str = "INFO") -> logging.Logger:
    """Configure JSON structured logging with request IDs."""
    from pythonjsonlogger.json import JsonFormatter

    logger = logging.getLogger("ragnok")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
        handler.setFormatter(formatter)
        handler.addFilter(RequestIdFilter())
        logger.addHandler(handler)

    return logger


logger = setup_structured_logging(os.environ.get("LOG_LEVEL", "INFO"))


# ─── Rate Limiter (slowapi) ───────────────────────────────────────

def build_limiter(rate_limit: str = DEFAULT_RATE_LIMIT) -> Limiter:
    """Per-client-IP limiter applied to every route through SlowAPIMiddleware.

    Honours RATELIMIT_ENABLED from the environment.
    """
    return Limiter(key_func=get_remote_address, default_limits=[rate_limit])


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """Custom 429 handler."""
    retry_after = exc.limit.limit.get_expiry() if getattr(exc, "limit", None) else 60
    logger.warning("Rate limit exceeded", extra={"client": get_remote_address(request),
                                                 "path": request.url.path})
    return JSONResponse(
        status_code=429,
        content={"error": "Too many requests, please try again later."},
        headers={"Retry-After": str(retry_after)},
    )


# ─── Request ID + Logging Middleware ──────────────────────────────

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Inject request ID, log requests, add security headers."""

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])
        request_id_var.set(rid)

        t0 = time.time()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error", extra={"path": request.url.path})
            raise

        elapsed_ms = round((time.time() - t0) * 1000, 1)
        logger.info(
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
                "client": request.client.host if request.client else "",
            },
        )

        # Security headers
        response.headers["X-Request-ID"] = rid
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"

        return response


# ─── Request body size limiter ───────────────────────────────────

class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_size: int = 65_536):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next):
        cl = request.headers.get("content-length")
        if cl and cl.isdigit() and int(cl) > self.max_size:
            return JSONResponse(status_code=413, content={"error": "Request body too large"})
        return await call_next(request)


# ─── CORS configuration ──────────────────────────────────────────

def configure_cors(app, allowed_origin: str):
    """Allow exactly one frontend origin."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[allowed_origin],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )


# ─── Error handlers ──────────────────────────────────────────────

async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON bodies are client errors, same as bad claim fields."""
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def generic_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s: %s", request.url.path, type(exc).__name__)
    return JSONResponse(status_code=500, content={"error": "Something went wrong"})


# ─── Apply all security to a FastAPI app ──────────────────────────

def apply_security(app, settings: Settings):
    """One-call setup: CORS, rate limiting, logging middleware, error handlers."""
    setup_structured_logging(settings.log_level)
    app.state.limiter = build_limiter(settings.rate_limit)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware)
    configure_cors(app, settings.frontend_url)
    app.add_middleware(RequestLoggingMiddleware)
