"""
SPRINGANIM - MAIN API SERVER
============================

FastAPI application serving spring samples, CSS animations and live
streams.

Features:
- Async endpoints
- CORS middleware for web clients
- Health checks
- Graceful shutdown
- Request timing log

Usage:
    uvicorn springanim.app.main:app --reload --port 8000
"""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from springanim import __version__
from springanim.app.api import springs, presets
from springanim.app.models import HealthResponse, StatsResponse, ErrorResponse
from springanim.app.dependencies import get_app_settings, get_database
from springanim.config import Settings, get_settings
from springanim.database import SpringDB, get_db, close_db


# ============================================================================
# APPLICATION LIFECYCLE
# ============================================================================

# Global startup time for uptime tracking
_startup_time: float = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle manager.

    Startup: load settings, initialize database.
    Shutdown: release database singleton.
    """
    global _startup_time

    print("=" * 80)
    print(" SPRINGANIM - STARTING")
    print("=" * 80)

    _startup_time = time.time()
    settings = get_settings()

    print("[Startup] Initializing database...")
    db = await get_db(settings.database.path)
    stats = await db.get_stats()
    print(f"[Startup] Database ready: {stats['presets']} presets, {stats['animations']} animations")

    physics = settings.physics
    print(
        f"[Startup] Physics: max_steps={physics.max_steps}, fps={physics.fps}, "
        f"prefixes={physics.prefixes}, default preset '{physics.default_preset}'"
    )

    print("=" * 80)
    print(" SPRINGANIM - READY")
    print("=" * 80)

    yield

    print("[Shutdown] Closing database...")
    await close_db()
    print("[Shutdown] Cleanup complete")


# ============================================================================
# APPLICATION SETUP
# ============================================================================

app = FastAPI(
    title="springanim API",
    description="Damped spring physics rendered as CSS keyframe animations",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log all HTTP requests with timing.

    Format: [METHOD] /path - 200 (12.3ms)
    """
    start_time = time.time()

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000

    print(f"[{request.method}] {request.url.path} - {response.status_code} ({duration_ms:.1f}ms)")

    return response


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    """Handle 404 Not Found (unknown routes and missing resources)."""
    detail = getattr(exc, "detail", None)
    if not detail or detail == "Not Found":
        error, message = "not_found", f"Endpoint {request.url.path} not found"
    else:
        error, message = "resource_not_found", str(detail)

    return JSONResponse(
        status_code=404,
        content=ErrorResponse(error=error, message=message).model_dump()
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    """Handle 500 Internal Server Error."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="internal_error",
            message="An unexpected error occurred",
            details={"exception": str(exc)}
        ).model_dump()
    )


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(springs.router)
app.include_router(presets.router)


@app.get("/api", tags=["system"])
async def api_root():
    """Service information and endpoint map."""
    return {
        "service": "springanim API",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "endpoints": {
            "sample": "/springs/sample",
            "animation": "/springs/animation",
            "live": "/springs/live",
            "presets": "/presets",
            "health": "/health"
        }
    }


@app.get("/health", response_model=HealthResponse, tags=["system"])
async def health_check(settings: Settings = Depends(get_app_settings)):
    """
    Health check (database connectivity).

    Returns:
        {
            "status": "healthy",
            "database": {"connected": true, "presets": 5, "animations": 12},
            "version": "1.0.0",
            "uptime_seconds": 3600.5
        }
    """
    try:
        db = await get_db(settings.database.path)
        db_stats = await db.get_stats()
        db_health = {
            "connected": True,
            "presets": db_stats["presets"],
            "animations": db_stats["animations"],
            "db_size_mb": db_stats["db_size_mb"]
        }
    except Exception as e:
        db_health = {
            "connected": False,
            "error": str(e)
        }

    return HealthResponse(
        status="healthy" if db_health["connected"] else "unhealthy",
        database=db_health,
        version=__version__,
        uptime_seconds=time.time() - _startup_time
    )


@app.get("/stats", response_model=StatsResponse, tags=["system"])
async def system_stats(db: SpringDB = Depends(get_database)):
    """Database row counts and uptime."""
    db_stats = await db.get_stats()

    return StatsResponse(
        database=db_stats,
        performance={
            "uptime_seconds": time.time() - _startup_time
        }
    )


# ============================================================================
# MAIN (for direct execution)
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    server = get_settings().server

    uvicorn.run(
        "springanim.app.main:app",
        host=server.host,
        port=server.port,
        reload=server.reload,
        log_level="info"
    )
