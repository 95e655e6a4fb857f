"""Broadcasts addressed to every registered device."""
import logging
from typing import Optional

from ..errors import NotFoundError, ValidationError
from ..storage import BaseStorage, Collection, Records
from ..utils.time_utils import new_id, parse_timestamp, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_TYPE = "info"
BROADCAST_SOURCE = "broadcast"


class BroadcastManager:
    """Creates broadcasts and lists them."""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    async def send_broadcast(
        self,
        title: Optional[str],
        message: Optional[str],
        type: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> dict:
        """Record a broadcast to every device registered right now.

        Raises:
            ValidationError: title or message missing
            NotFoundError: no devices are registered
        """
        if not title or not message:
            raise ValidationError("Title and message are required")

        devices = await self.storage.load(Collection.DEVICES)
        if not devices:
            raise NotFoundError("No devices registered")

        broadcast_id = new_id()
        broadcast = {
            "id": broadcast_id,
            "title": title,
            "message": message,
            "type": type or DEFAULT_TYPE,
            "data": {
                **(data or {}),
                "source": BROADCAST_SOURCE,
                "broadcastId": broadcast_id,
            },
            "sentAt": utc_now_iso(),
            "recipients": [d.get("id") for d in devices],
            "receivedBy": [],
        }

        async with self.storage.locked(Collection.BROADCASTS):
            broadcasts = await self.storage.load(Collection.BROADCASTS)
            broadcasts.append(broadcast)
            await self.storage.save(Collection.BROADCASTS, broadcasts)

        logger.info(f"Broadcast {broadcast_id} sent to {len(devices)} device(s)")
        return broadcast

    async def list_broadcasts(self) -> Records:
        return await self.storage.load(Collection.BROADCASTS)

    async def recent_broadcasts(self, limit: int = 10) -> Records:
        """Newest broadcasts first by parsed sentAt. Equal timestamps keep insertion order."""
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        broadcasts = await self.storage.load(Collection.BROADCASTS)
        ordered = sorted(broadcasts, key=lambda b: parse_timestamp(b.get("sentAt")), reverse=True)
        return ordered[:limit]
