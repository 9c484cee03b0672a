"""
Glass Shop Back Office - Backend API
FastAPI over a pluggable JSON document store (memory | json | sqlite)

Install dependencies:
pip install -e .

Run server:
uvicorn main:app --host 0.0.0.0 --port 8000
"""

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import contextvars
import logging
import os
import time
import uuid

from settings import get_settings
from core.errors import BackOfficeError, StorageError
from core.notifications import RequestNotifier
from core.rendering import CompanyProfile

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)
request_start_time_var = contextvars.ContextVar('request_start_time', default=None)

# ============================================================================
# BACKEND CONFIGURATION
# ============================================================================
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

STORAGE_BACKEND = settings.storage_backend.lower()
DATABASE_URL = settings.db_url

logger.info(f"🔧 Storage Backend: {STORAGE_BACKEND.upper()}")

# ============================================================================
# STORAGE ADAPTER INITIALIZATION
# ============================================================================

storage_adapter = None
# ---- DI helpers (used by routers/*) ----
def get_storage_adapter(_=None):
    return storage_adapter


def get_notifier() -> RequestNotifier:
    return RequestNotifier(settings=settings)


def get_company_profile() -> CompanyProfile:
    return CompanyProfile.from_settings(settings)


if STORAGE_BACKEND == "memory":
    from adapters.memory import MemoryStore

    storage_adapter = MemoryStore()
    logger.info("✓ In-memory store initialized (data is lost on restart)")

elif STORAGE_BACKEND == "json":
    from adapters.json import JsonStore

    storage_adapter = JsonStore(settings.data_dir)
    logger.info(f"✓ JSON file store initialized at {settings.data_dir}")

elif STORAGE_BACKEND == "sqlite":
    try:
        from adapters.sqlite import SqliteStore

        storage_adapter = SqliteStore.from_url(DATABASE_URL)
        logger.info(f"✓ SQLite store initialized ({DATABASE_URL.split('://')[0]})")
    except Exception as e:
        logger.error(f"✗ Failed to initialize SQLite store: {e}")
        raise

else:
    raise ValueError(f"Unknown STORAGE_BACKEND: {STORAGE_BACKEND}")

# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="Glass Shop Back Office API",
    description="Orders, purchase orders, invoices, requests and directory records",
    version="1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# ========== Request Tracing Middleware ==========
@app.middleware("http")
async def request_tracing_middleware(request, call_next):
    """Add request_id and timing to all requests."""
    request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    request_start_time_var.set(time.time())

    response = await call_next(request)

    latency = time.time() - request_start_time_var.get()
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} -> "
        f"{response.status_code} ({round(latency * 1000, 2)} ms)"
    )

    response.headers["X-Request-ID"] = request_id
    return response


ALLOWED_ORIGINS = settings.get_origins_list()

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ========== Error mapping ==========

@app.exception_handler(BackOfficeError)
async def back_office_exception_handler(request, exc: BackOfficeError):
    content = {"detail": exc.message}
    if isinstance(exc, StorageError):
        logger.error(f"[{request_id_var.get()}] Storage failure: {exc.message}", exc_info=exc.cause)
        content["error"] = exc.message
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )

# ============================================================================
# ENDPOINTS
# ============================================================================

startup_time = time.time()


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "ok",
        "backend": STORAGE_BACKEND,
        "uptime_seconds": round(time.time() - startup_time, 1),
    }


@app.get("/healthz")
async def healthz():
    """Liveness plus a storage round-trip where the backend supports it."""
    storage_status = "ok"
    try:
        if hasattr(storage_adapter, "ping"):
            storage_adapter.ping()
        else:
            storage_adapter.list_keys("orders")
    except Exception as e:
        logger.error(f"Health check storage failure: {e}")
        storage_status = "error"

    code = status.HTTP_200_OK if storage_status == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(
        status_code=code,
        content={"status": storage_status, "backend": STORAGE_BACKEND, "email": settings.email_configured()},
    )


# ========== Routers ==========
from routers import orders as orders_router
from routers import purchase_orders as purchase_orders_router
from routers import invoices as invoices_router
from routers import residential_requests as residential_requests_router
from routers import service_requests as service_requests_router
from routers import directory as directory_router

app.include_router(orders_router.router, prefix="/api")
app.include_router(purchase_orders_router.router, prefix="/api")
app.include_router(invoices_router.router, prefix="/api")
app.include_router(residential_requests_router.router, prefix="/api")
app.include_router(service_requests_router.router, prefix="/api")
for r in directory_router.routers:
    app.include_router(r, prefix="/api")


@app.on_event("startup")
async def startup_event():
    global startup_time
    startup_time = time.time()
    logger.info("Back office API starting up...")
    logger.info(f"Storage Backend: {STORAGE_BACKEND.upper()}")
    logger.info(f"Email backend: {settings.email_backend} (configured: {settings.email_configured()})")
    logger.info(f"Allowed origins: {ALLOWED_ORIGINS}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Back office API shutting down...")
    if STORAGE_BACKEND == "sqlite":
        storage_adapter.engine.dispose()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
