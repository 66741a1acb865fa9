# arrivals/main.py
"""
FastAPI application entry point.
Includes security middleware, error translation, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from arrivals.routers import billboard, notifications, checkins, health
from arrivals.database import create_tables, seed_authorized_users
from arrivals.config import settings
from arrivals.errors import ArrivalsError, UpstreamAuthExpired, UpstreamUnavailable
from arrivals.services.billboard_store import GlobalBillboardStore
from arrivals.services.directory_client import DirectoryClient
from arrivals.services.pickup_requests import PickupRequestLog
from arrivals.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="PCO Arrivals Billboard API",
    description="Children's ministry pickup board on top of Planning Center Check-Ins.",
    version="2.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Shared-secret gate for the whole /api surface.
    Set API_KEY in .env. Leave empty to disable.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/health", "/docs", "/redoc", "/openapi.json"}
        if request.method == "OPTIONS" or request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Error translation ────────────────────────────────────────────────────────
@app.exception_handler(ArrivalsError)
async def arrivals_error_handler(request: Request, exc: ArrivalsError):
    if isinstance(exc, (UpstreamUnavailable, UpstreamAuthExpired)):
        logger.warning(f"{request.url.path}: {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(billboard.router,     prefix="/api", tags=["📋 Global Billboard"])
app.include_router(notifications.router, prefix="/api", tags=["🔔 Pickup Notifications"])
app.include_router(checkins.router,      prefix="/api", tags=["🧒 Check-Ins"])
app.include_router(health.router,        prefix="/api", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Arrivals Billboard starting up...")
    create_tables()
    seed_authorized_users(settings.authorized_user_ids)
    logger.info("✅ Allow-list tables ready")

    app.state.billboard_store = GlobalBillboardStore()
    app.state.pickup_requests = PickupRequestLog()
    app.state.directory = DirectoryClient()
    logger.info(f"📡 Upstream directory: {settings.PCO_API_BASE} "
                f"(timeout {settings.UPSTREAM_TIMEOUT_SECONDS}s)")
    if not settings.PCO_ACCESS_TOKEN:
        logger.warning("PCO_ACCESS_TOKEN is not set — upstream calls will be rejected")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Arrivals Billboard shutting down...")
    directory = getattr(app.state, "directory", None)
    if directory is not None:
        await directory.aclose()
