# app/main.py
"""
FastAPI application entry point.
Includes security middleware, global error handlers, and all routers.
Builds the record store, scheduler and services on startup, and quiesces
every generation chain before the database is closed on shutdown.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from app.routers import devices, transactions, health
from app.database import SessionLocal, create_tables, close_engine
from app.config import settings
from app.services.device_service import DeviceService
from app.services.event_source import RandomEventSource
from app.services.record_store import DeviceRepository, TransactionRepository
from app.services.scheduler import TransactionScheduler
from app.services.transaction_service import TransactionService
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Access Device Simulator API",
    description="Simulated access-control devices that generate random access transactions.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (the polling dashboard runs on another origin) ─────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to dashboard origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth.
    Health check and docs stay open. Set API_KEY in .env. Leave empty to disable auth.
    """
    async def dispatch(self, request: Request, call_next):
        open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
        if request.url.path in open_paths or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
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


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(devices.router,      prefix="/api/v1", tags=["📟 Devices"])
app.include_router(transactions.router, prefix="/api/v1", tags=["🧾 Transactions"])
app.include_router(health.router,       prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Access Device Simulator starting up...")
    await create_tables()
    logger.info("✅ Database tables ready")

    device_repo = DeviceRepository(SessionLocal)
    transaction_repo = TransactionRepository(SessionLocal)
    scheduler = TransactionScheduler(transaction_repo, RandomEventSource.from_settings(settings))

    app.state.scheduler = scheduler
    app.state.device_service = DeviceService(device_repo, scheduler, settings.DEVICE_TYPES)
    app.state.transaction_service = TransactionService(
        transaction_repo,
        default_limit=settings.TRANSACTIONS_DEFAULT_LIMIT,
        max_limit=settings.TRANSACTIONS_MAX_LIMIT,
    )

    await app.state.device_service.reconcile_on_startup(resume=settings.RESUME_ACTIVE_DEVICES)
    logger.info(f"📟 Device types: {settings.DEVICE_TYPES}")
    logger.info(
        f"⏱  Generation delay: {settings.TRANSACTION_MIN_DELAY_MS}–"
        f"{settings.TRANSACTION_MAX_DELAY_MS}ms"
    )
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Access Device Simulator shutting down...")
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.stop_all()
        await scheduler.drain()
    await close_engine()
    logger.info("✅ Generation stopped, database closed")
