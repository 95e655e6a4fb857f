"""Device schemas for API request/response models."""
from typing import Optional
from pydantic import BaseModel, Field


class DeviceRegisterRequest(BaseModel):
    """Device registration. Any extra attributes are stored on the device."""
    token: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")
    platform: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"


class DeviceRegisterResponse(BaseModel):
    """Response after registering a device."""
    success: bool
    message: str
    device_id: str = Field(..., alias="deviceId")

    class Config:
        populate_by_name = True
