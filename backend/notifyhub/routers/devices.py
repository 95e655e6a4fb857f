"""Device registration API endpoints for push notifications."""
import logging
from typing import List

from fastapi import APIRouter, Depends

from ..dependencies import get_device_registry
from ..schemas.device import DeviceRegisterRequest, DeviceRegisterResponse
from ..services.device_registry import DeviceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/devices", tags=["devices"])

# Device list for the broadcast admin screen
broadcast_devices_router = APIRouter(prefix="/api/broadcast", tags=["devices"])


@router.post("", response_model=DeviceRegisterResponse)
async def register_device(
    request: DeviceRegisterRequest,
    registry: DeviceRegistry = Depends(get_device_registry),
):
    """Register a device for push notifications.

    If the token already exists, the stored device is updated with the
    request's attributes. Otherwise a new device is created. Apps should
    call this on every launch to keep the token and owning user current.
    """
    device_id = await registry.register_device(request.model_dump(by_alias=True, exclude_unset=True))
    return DeviceRegisterResponse(
        success=True,
        message="Device registered successfully",
        device_id=device_id,
    )


@router.get("", response_model=List[dict])
async def list_devices(registry: DeviceRegistry = Depends(get_device_registry)):
    """Get all registered devices."""
    return await registry.list_devices()


@broadcast_devices_router.get("/devices", response_model=List[dict])
async def list_broadcast_devices(registry: DeviceRegistry = Depends(get_device_registry)):
    """Get all devices for the broadcast admin."""
    return await registry.list_devices()
