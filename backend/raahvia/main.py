from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from raahvia.config import settings
from raahvia.observability.logging import configure_logging
from raahvia.api.errors import install_error_handlers
from raahvia.api.routes_health import router as health_router
from raahvia.api.routes_scan import router as scan_router
from raahvia.api.routes_catalog import router as catalog_router
from raahvia.services.catalog import load_catalog

configure_logging()
logger = logging.getLogger("raahvia")

ENDPOINTS = [
    ("POST", "/api/qr-scan", "Scan QR code"),
    ("GET", "/api/qr/{qr_code}", "Scan QR code (GET)"),
    ("GET", "/api/destinations/{building}", "Get destinations"),
    ("GET", "/api/path/{destination_id}", "Get navigation path"),
    ("GET", "/health", "Health check"),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events.

    A catalog that fails to load aborts startup; uvicorn then exits non-zero.
    """
    # Startup
    app.state.catalog = load_catalog()
    app.state.started_at = time.monotonic()

    logger.info("=" * 60)
    logger.info(f"🚀 {settings.service_name} v{settings.service_version}")
    logger.info(f"   Environment: {settings.environment}")
    for method, path, label in ENDPOINTS:
        logger.info(f"   {method:<4} {path:<32} - {label}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.service_name,
    version=settings.service_version,
    lifespan=lifespan,
)


@app.get("/")
def root():
    return {
        "success": True,
        "service": settings.service_name,
        "version": settings.service_version,
        "status": "ONLINE",
        "documentation": "See /health for status and /docs for endpoints",
    }


# Same baseline as helmet() defaults for a JSON API
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
    "X-Permitted-Cross-Domain-Policies": "none",
}


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    if settings.is_production:
        response.headers.setdefault("Strict-Transport-Security", "max-age=15552000; includeSubDomains")
    return response


@app.middleware("http")
async def access_log(request: Request, call_next):
    started = time.perf_counter()
    status_code = 500  # unless call_next returns a response
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {status_code} ({elapsed_ms:.1f} ms)")


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)

install_error_handlers(app)

# Routers
app.include_router(health_router)
app.include_router(scan_router)
app.include_router(catalog_router)
