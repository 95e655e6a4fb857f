"""Broadcast schemas for API request/response models."""
from typing import Optional
from pydantic import BaseModel, Field


class BroadcastSendRequest(BaseModel):
    """Schema for sending a broadcast to all devices."""
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[str] = None
    data: Optional[dict] = None


class BroadcastSendResponse(BaseModel):
    """Response after sending a broadcast."""
    success: bool
    message: str
    broadcast_id: str = Field(..., alias="broadcastId")
    recipients: int

    class Config:
        populate_by_name = True


class BroadcastReceivedRequest(BaseModel):
    """Receive confirmation; the broadcast may be named by broadcastId or id."""
    broadcast_id: Optional[str] = Field(None, alias="broadcastId")
    id: Optional[str] = None
    device_id: Optional[str] = Field(None, alias="deviceId")
    status: Optional[str] = None

    class Config:
        populate_by_name = True

    @property
    def resolved_broadcast_id(self) -> Optional[str]:
        return self.broadcast_id or self.id
