"""Pydantic schemas for API request/response models."""
from .device import (
    DeviceRegisterRequest,
    DeviceRegisterResponse,
)
from .message import (
    MessageCreate,
    MessageSendRequest,
    MessageSendTargetedRequest,
    MessageReadRequest,
    MessageResponse,
    MessageSendTargetedResponse,
    SuccessResponse,
)
from .broadcast import (
    BroadcastSendRequest,
    BroadcastSendResponse,
    BroadcastReceivedRequest,
)
from .user import (
    UserResponse,
    UserUpsertRequest,
    UserUpsertResponse,
)

__all__ = [
    "DeviceRegisterRequest",
    "DeviceRegisterResponse",
    "MessageCreate",
    "MessageSendRequest",
    "MessageSendTargetedRequest",
    "MessageReadRequest",
    "MessageResponse",
    "MessageSendTargetedResponse",
    "SuccessResponse",
    "BroadcastSendRequest",
    "BroadcastSendResponse",
    "BroadcastReceivedRequest",
    "UserResponse",
    "UserUpsertRequest",
    "UserUpsertResponse",
]
