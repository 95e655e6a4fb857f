"""Read receipts on sent messages and receive confirmations on broadcasts."""
import logging
from typing import Optional

from ..errors import NotFoundError, ValidationError
from ..storage import BaseStorage, Collection
from ..utils.time_utils import utc_now_iso
from .message_lifecycle import find_index

logger = logging.getLogger(__name__)

STATUS_READ = "read"


class ReceiptTracker:
    """Records which devices read a message or received a broadcast."""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    async def mark_read(self, message_id: Optional[str], device_id: Optional[str]) -> dict:
        """Mark a sent message as read by one of its recipients.

        Marking again keeps the status and overwrites ``readAt``.
        """
        if not message_id or not device_id:
            raise ValidationError("Message ID and Device ID are required")

        async with self.storage.locked(Collection.SENT_MESSAGES):
            sent = await self.storage.load(Collection.SENT_MESSAGES)
            index = find_index(sent, message_id)
            if index == -1:
                raise NotFoundError("Message not found")

            recipient = next(
                (r for r in sent[index].get("recipients", []) if r.get("deviceId") == device_id),
                None,
            )
            if recipient is None:
                raise NotFoundError("Recipient not found")

            recipient["status"] = STATUS_READ
            recipient["readAt"] = utc_now_iso()
            await self.storage.save(Collection.SENT_MESSAGES, sent)

        logger.info(f"Message {message_id} read on device {device_id}")
        return recipient

    async def mark_broadcast_received(
        self,
        broadcast_id: Optional[str],
        device_id: Optional[str],
        status: Optional[str] = None,
    ) -> bool:
        """Add ``device_id`` to a broadcast's receivedBy set.

        Returns:
            True if the device was added, False if it was already recorded
        """
        if not broadcast_id or not device_id:
            raise ValidationError("Broadcast ID and Device ID are required")

        async with self.storage.locked(Collection.BROADCASTS):
            broadcasts = await self.storage.load(Collection.BROADCASTS)
            index = find_index(broadcasts, broadcast_id)
            if index == -1:
                raise NotFoundError("Broadcast not found")

            broadcast = broadcasts[index]
            received_by = broadcast.setdefault("receivedBy", [])
            if device_id in received_by:
                logger.debug(f"Broadcast {broadcast_id} already received by {device_id}")
                return False

            if device_id not in broadcast.get("recipients", []):
                logger.warning(f"Device {device_id} confirmed broadcast {broadcast_id} it was not sent to")

            received_by.append(device_id)
            await self.storage.save(Collection.BROADCASTS, broadcasts)

        logger.info(
            f"Broadcast {broadcast_id} received by {device_id}"
            + (f" (status: {status})" if status else "")
        )
        return True
