"""
Health check endpoint for deployment monitoring.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Request

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(request: Request):
    """
    Health check endpoint for deployment monitoring.

    Reports "degraded" when the database is unreachable or the PDF renderer
    is not ready.
    """
    status = "healthy"

    db_ok = await request.app.state.store.ping()
    renderer = request.app.state.renderer
    renderer_ok = renderer.is_ready()

    if not (db_ok and renderer_ok):
        status = "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if db_ok else "error",
        "renderer": {"name": renderer.name, "ready": renderer_ok},
        "version": "1.0.0",
    }
