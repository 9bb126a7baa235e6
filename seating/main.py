"""
Seating - restaurant seat allocation API
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
import structlog

from seating.config import settings
from seating.database import SessionLocal
from seating.exceptions import SeatingError
from seating.api import layouts, reservations, seat_allocations, waitlist

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Seating API", version=VERSION)
    yield
    logger.info("Shutting down Seating API")


# Create FastAPI application
app = FastAPI(
    title="Seating",
    description="Seat allocation for restaurant floor layouts",
    version=VERSION,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SeatingError)
async def seating_error_handler(request: Request, exc: SeatingError):
    """Expected allocation failures become JSON with a machine-readable kind"""
    logger.info(
        "Request rejected",
        path=request.url.path,
        error=exc.kind,
        detail=exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": VERSION}


@app.get("/health/ready")
async def ready():
    """Readiness check with database verification"""
    checks = {}

    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
restaurant_prefix = "/restaurants/{restaurant_id}"
app.include_router(layouts.router, prefix=f"{restaurant_prefix}/layouts", tags=["Layouts"])
app.include_router(
    seat_allocations.router,
    prefix=f"{restaurant_prefix}/seat_allocations",
    tags=["Seat Allocations"],
)
app.include_router(reservations.router, prefix=f"{restaurant_prefix}/reservations", tags=["Reservations"])
app.include_router(waitlist.router, prefix=f"{restaurant_prefix}/waitlist", tags=["Waitlist"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seating.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
