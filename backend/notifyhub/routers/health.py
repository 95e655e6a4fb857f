"""Health check endpoint."""
from fastapi import APIRouter, Request

from ..utils.time_utils import utc_now_iso

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Report liveness, version and the active storage backend."""
    config = request.app.state.settings
    return {
        "status": "ok",
        "timestamp": utc_now_iso(),
        "serverVersion": config.server_version,
        "environment": config.environment,
        "storage": request.app.state.storage.mode,
    }
