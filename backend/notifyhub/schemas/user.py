"""User schemas - users are derived from devices."""
from typing import Optional, List
from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """A user summarized from the devices it owns."""
    id: str
    name: str
    email: Optional[str] = None
    device_count: int = Field(..., alias="deviceCount")
    devices: List[str]
    platforms: List[str] = []
    last_seen: Optional[str] = Field(None, alias="lastSeen")

    class Config:
        populate_by_name = True


class UserUpsertRequest(BaseModel):
    """Create or update a user."""
    id: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")
    token: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    platform: Optional[str] = None

    class Config:
        populate_by_name = True


class UserUpsertResponse(BaseModel):
    """Response after creating or updating a user."""
    success: bool
    message: str
    user_id: str = Field(..., alias="userId")
    device_ids: List[str] = Field(..., alias="deviceIds")

    class Config:
        populate_by_name = True
