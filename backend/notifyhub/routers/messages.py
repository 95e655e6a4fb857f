"""Message API endpoints - compose, send and read receipts."""
from typing import List

from fastapi import APIRouter, Depends

from ..dependencies import get_message_lifecycle, get_receipt_tracker
from ..schemas.message import (
    MessageCreate,
    MessageSendRequest,
    MessageSendTargetedRequest,
    MessageReadRequest,
    MessageResponse,
    MessageSendTargetedResponse,
    SuccessResponse,
)
from ..services.message_lifecycle import MessageLifecycle
from ..services.receipt_tracker import ReceiptTracker

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.post("", response_model=MessageResponse, status_code=201)
async def create_message(
    request: MessageCreate,
    lifecycle: MessageLifecycle = Depends(get_message_lifecycle),
):
    """Create a new pending message."""
    message = await lifecycle.create_message(request.title, request.body, request.data)
    return MessageResponse(success=True, message="Message created successfully", data=message)


@router.get("/pending", response_model=List[dict])
async def list_pending(lifecycle: MessageLifecycle = Depends(get_message_lifecycle)):
    """Get all pending messages."""
    return await lifecycle.list_pending()


@router.get("/sent", response_model=List[dict])
async def list_sent(lifecycle: MessageLifecycle = Depends(get_message_lifecycle)):
    """Get all sent messages with their recipients."""
    return await lifecycle.list_sent()


@router.post("/send", response_model=MessageResponse)
async def send_message(
    request: MessageSendRequest,
    lifecycle: MessageLifecycle = Depends(get_message_lifecycle),
):
    """Send a pending message to every registered device."""
    sent_message = await lifecycle.send_message(request.message_id)
    return MessageResponse(success=True, message="Message sent successfully", data=sent_message)


@router.post("/send-targeted", response_model=MessageSendTargetedResponse)
async def send_targeted(
    request: MessageSendTargetedRequest,
    lifecycle: MessageLifecycle = Depends(get_message_lifecycle),
):
    """Send a pending message to the devices of specific users.

    Without targetUsers (or with an empty list) every device receives it.
    """
    sent_message, count = await lifecycle.send_targeted(request.message_id, request.target_users)
    return MessageSendTargetedResponse(
        success=True,
        message_id=sent_message["id"],
        sent_to=count,
    )


@router.post("/read", response_model=SuccessResponse)
async def mark_read(
    request: MessageReadRequest,
    tracker: ReceiptTracker = Depends(get_receipt_tracker),
):
    """Mark a sent message as read on a device."""
    await tracker.mark_read(request.message_id, request.device_id)
    return SuccessResponse(success=True, message="Message marked as read")
