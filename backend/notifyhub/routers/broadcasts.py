"""Broadcast API endpoints."""
from typing import List

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_broadcast_manager, get_receipt_tracker
from ..schemas.broadcast import BroadcastSendRequest, BroadcastSendResponse, BroadcastReceivedRequest
from ..schemas.message import SuccessResponse
from ..services.broadcast_manager import BroadcastManager
from ..services.receipt_tracker import ReceiptTracker

router = APIRouter(prefix="/api/broadcasts", tags=["broadcasts"])

RECEIPT_METHODS = ["POST", "PUT", "PATCH"]


@router.get("", response_model=List[dict])
async def list_broadcasts(manager: BroadcastManager = Depends(get_broadcast_manager)):
    """Get all broadcasts."""
    return await manager.list_broadcasts()


@router.get("/recent", response_model=List[dict])
async def recent_broadcasts(
    limit: int = Query(10),
    manager: BroadcastManager = Depends(get_broadcast_manager),
):
    """Get the newest broadcasts first."""
    return await manager.recent_broadcasts(limit)


@router.post("/send", response_model=BroadcastSendResponse)
async def send_broadcast(
    request: BroadcastSendRequest,
    manager: BroadcastManager = Depends(get_broadcast_manager),
):
    """Send a broadcast to all registered devices."""
    broadcast = await manager.send_broadcast(request.title, request.message, request.type, request.data)
    count = len(broadcast["recipients"])
    return BroadcastSendResponse(
        success=True,
        message=f"Broadcast sent to {count} devices",
        broadcast_id=broadcast["id"],
        recipients=count,
    )


async def mark_broadcast_received(
    request: BroadcastReceivedRequest,
    tracker: ReceiptTracker = Depends(get_receipt_tracker),
):
    """Mark a broadcast as received by a device."""
    await tracker.mark_broadcast_received(request.resolved_broadcast_id, request.device_id, request.status)
    return SuccessResponse(success=True, message="Broadcast marked as received")


# Clients confirm receipt through several paths and verbs
router.add_api_route(
    "/received",
    mark_broadcast_received,
    methods=RECEIPT_METHODS,
    response_model=SuccessResponse,
)
router.add_api_route(
    "",
    mark_broadcast_received,
    methods=RECEIPT_METHODS,
    response_model=SuccessResponse,
    name="mark_broadcast_received_alias",
)
