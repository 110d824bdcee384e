# complyark/main.py - Application assembly: tracing, middleware, routes
from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
import time

# Core imports
from complyark.core.config import settings
from complyark.db.database import init_db, engine, AsyncSessionLocal
from complyark.db.store import SqlCaseStore, get_memory_store
from complyark.db.store.seed import seed_demo_data

# Import tracing
from complyark.core import tracing

# Import API routes
from complyark.api.v1 import api_router

# Import middleware
from complyark.middleware.security import SecurityHeadersMiddleware
from complyark.middleware.cors import setup_cors_middleware
from complyark.middleware.rate_limiting import limiter, rate_limit_exceeded_handler

# Import exception handlers
from complyark.exceptions.handlers import (
    http_exception_handler,
    validation_exception_handler,
    global_exception_handler,
    starlette_http_exception_handler
)

# Global variable to track tracing status
tracing_enabled = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: prepare the configured case store
    """
    tracing.info("ComplyArk API startup initiated")

    if settings.STORE_BACKEND == "database":
        try:
            await init_db()
            tracing.info("Database initialized successfully")
        except Exception as e:
            tracing.error(f"Database initialization failed: {e}")
            raise

        if settings.SEED_DEMO_DATA:
            async with AsyncSessionLocal() as session:
                await seed_demo_data(SqlCaseStore(session))
    elif settings.SEED_DEMO_DATA:
        await seed_demo_data(get_memory_store())

    tracing.info(f"Environment: {settings.ENVIRONMENT}")
    tracing.info(f"Store backend: {settings.STORE_BACKEND}")
    tracing.info(f"Tracing: {'Enabled' if tracing_enabled else 'Disabled'}")
    tracing.info(f"Rate Limiting: {'Enabled' if settings.RATE_LIMIT_ENABLED else 'Disabled'}")

    tracing.info("ComplyArk API v1.0.0 startup complete")

    yield

    tracing.info("ComplyArk API shutdown initiated")
    if settings.STORE_BACKEND == "database":
        await engine.dispose()
    tracing.info("ComplyArk API shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="ComplyArk API",
    description="Data-principal request and grievance tracking for data fiduciaries",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    openapi_url="/openapi.json" if settings.ENVIRONMENT == "development" else None
)

# =============================================================================
# TRACING SETUP
# =============================================================================

try:
    tracing_enabled = tracing.setup_tracing(
        app, engine if settings.STORE_BACKEND == "database" else None
    )
except Exception as e:
    tracing.error(f"❌ Failed to initialize tracing: {e}")
    tracing_enabled = False

# =============================================================================
# MIDDLEWARE SETUP (Order matters!)
# =============================================================================

app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.ENVIRONMENT == "production")
setup_cors_middleware(app)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

# Outermost, so every response carries X-Trace-ID
app.add_middleware(tracing.TracingMiddleware)

# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# =============================================================================
# PROMETHEUS METRICS
# =============================================================================

instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_group_untemplated=False,
    should_instrument_requests_inprogress=True,
    inprogress_labels=True
)
instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

# =============================================================================
# API ROUTES
# =============================================================================

app.include_router(api_router, prefix="/api/v1")


# =============================================================================
# SYSTEM ENDPOINTS
# =============================================================================

@app.get("/health", tags=["System"])
async def health_check():
    """
    Health check; in database mode also tests connectivity
    """
    checks = {
        "store": settings.STORE_BACKEND,
        "tracing": "enabled" if tracing_enabled else "disabled",
        "rate_limiting": "enabled" if settings.RATE_LIMIT_ENABLED else "disabled"
    }

    if settings.STORE_BACKEND == "database":
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = "connected"
        except Exception as e:
            tracing.error(f"Health check failed: {e}",
                          endpoint="/health",
                          status="failed",
                          error_type=type(e).__name__)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service unhealthy - database connection failed"
            )

    return {
        "status": "healthy",
        "service": "ComplyArk API",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "trace_id": tracing.get_current_trace_id(),
        "checks": checks
    }


@app.get("/", tags=["System"])
async def api_information():
    """API information endpoint"""
    return {
        "message": "ComplyArk API - data-principal requests and grievances",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "status": "operational",
        "trace_id": tracing.get_current_trace_id(),
        "endpoints": {
            "health": "/health",
            "metrics": "/metrics",
            "public": "/api/v1/public/{token}",
            "cases": "/api/v1/cases",
            "statuses": "/api/v1/statuses",
            "organizations": "/api/v1/organizations",
            "users": "/api/v1/users",
            "documentation": "/docs" if settings.ENVIRONMENT == "development" else "Contact administrator"
        },
        "timestamp": time.time()
    }
