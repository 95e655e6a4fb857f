"""Message schemas for API request/response models."""
from typing import Any, Optional, List
from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    """Schema for composing a pending message."""
    title: Optional[str] = None
    body: Optional[str] = None
    data: Optional[Any] = None


class MessageSendRequest(BaseModel):
    """Send a pending message to every device."""
    message_id: Optional[str] = Field(None, alias="messageId")

    class Config:
        populate_by_name = True


class MessageSendTargetedRequest(BaseModel):
    """Send a pending message to the devices of selected users."""
    message_id: Optional[str] = Field(None, alias="messageId")
    target_users: Optional[List[str]] = Field(None, alias="targetUsers")

    class Config:
        populate_by_name = True


class MessageReadRequest(BaseModel):
    """Read receipt from a device."""
    message_id: Optional[str] = Field(None, alias="messageId")
    device_id: Optional[str] = Field(None, alias="deviceId")

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    """Response carrying a message record."""
    success: bool
    message: str
    data: dict


class MessageSendTargetedResponse(BaseModel):
    """Response after a targeted send."""
    success: bool
    message_id: str = Field(..., alias="messageId")
    sent_to: int = Field(..., alias="sentTo")

    class Config:
        populate_by_name = True


class SuccessResponse(BaseModel):
    """Generic acknowledgement."""
    success: bool
    message: str
