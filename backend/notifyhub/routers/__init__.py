"""API routers."""
from .devices import router as devices_router, broadcast_devices_router
from .messages import router as messages_router
from .broadcasts import router as broadcasts_router
from .users import router as users_router
from .health import router as health_router

__all__ = [
    "devices_router",
    "broadcast_devices_router",
    "messages_router",
    "broadcasts_router",
    "users_router",
    "health_router",
]
