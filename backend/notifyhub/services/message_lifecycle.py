"""Message lifecycle - pending queue and fan-out to sent messages.

A message is created pending and moves to sent exactly once. Sending
removes it from the pending collection and appends a sent record whose
recipient list is a snapshot of the selected devices at send time.
"""
import logging
from typing import Any, Iterable, Optional, Tuple

from ..errors import NotFoundError, ValidationError
from ..storage import BaseStorage, Collection, Records
from ..utils.time_utils import new_id, utc_now_iso

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_SENT = "sent"

TARGET_ALL = "all"
TARGET_SPECIFIC = "specific"


def build_recipient(device: dict) -> dict:
    """Snapshot of a device for a sent message's recipient list."""
    return {
        "deviceId": device.get("id"),
        "token": device.get("token"),
        "userId": device.get("userId"),
        "status": STATUS_SENT,
        "readAt": None,
    }


def find_index(records: Records, record_id: str) -> int:
    """Position of the record with ``record_id``, or -1."""
    for index, record in enumerate(records):
        if record.get("id") == record_id:
            return index
    return -1


class MessageLifecycle:
    """Creates pending messages and sends them to devices."""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    async def create_message(self, title: Optional[str], body: Optional[str], data: Optional[Any] = None) -> dict:
        if not title or not body:
            raise ValidationError("Title and body are required")

        message = {
            "id": new_id(),
            "title": title,
            "body": body,
            "data": data or {},
            "createdAt": utc_now_iso(),
            "status": STATUS_PENDING,
        }

        async with self.storage.locked(Collection.PENDING_MESSAGES):
            pending = await self.storage.load(Collection.PENDING_MESSAGES)
            pending.append(message)
            await self.storage.save(Collection.PENDING_MESSAGES, pending)

        logger.info(f"Message created: {message['id']}")
        return message

    async def list_pending(self) -> Records:
        return await self.storage.load(Collection.PENDING_MESSAGES)

    async def list_sent(self) -> Records:
        return await self.storage.load(Collection.SENT_MESSAGES)

    async def send_message(self, message_id: Optional[str]) -> dict:
        """Send a pending message to every registered device.

        Raises:
            ValidationError: no message id was given
            NotFoundError: no devices are registered (checked first), or
                no pending message has this id
        """
        if not message_id:
            raise ValidationError("Message ID is required")

        async with self.storage.locked(Collection.PENDING_MESSAGES, Collection.SENT_MESSAGES):
            devices = await self.storage.load(Collection.DEVICES)
            if not devices:
                raise NotFoundError("No devices registered")

            pending = await self.storage.load(Collection.PENDING_MESSAGES)
            index = find_index(pending, message_id)
            if index == -1:
                raise NotFoundError("Message not found")

            sent_message, _ = await self._transition(pending, index, devices)

        return sent_message

    async def send_targeted(self, message_id: Optional[str], target_users: Optional[Iterable[str]] = None) -> Tuple[dict, int]:
        """Send a pending message to the devices of ``target_users``.

        An empty or missing ``target_users`` sends to every device. When the
        selection matches no device the message stays pending.

        Returns:
            Tuple of (sent message, number of recipients)
        """
        if not message_id:
            raise ValidationError("Message ID is required")

        targets = set(target_users or [])

        async with self.storage.locked(Collection.PENDING_MESSAGES, Collection.SENT_MESSAGES):
            pending = await self.storage.load(Collection.PENDING_MESSAGES)
            index = find_index(pending, message_id)
            if index == -1:
                raise NotFoundError("Message not found")

            devices = await self.storage.load(Collection.DEVICES)
            if targets:
                selected = [d for d in devices if d.get("userId") in targets]
            else:
                selected = devices

            if not selected:
                raise NotFoundError("No matching devices found for specified users")

            target_type = TARGET_SPECIFIC if targets else TARGET_ALL
            sent_message, count = await self._transition(pending, index, selected, target_type)

        return sent_message, count

    async def _transition(
        self,
        pending: Records,
        index: int,
        devices: Records,
        target_type: Optional[str] = None,
    ) -> Tuple[dict, int]:
        """Move ``pending[index]`` to the sent collection. Caller holds both locks."""
        message = pending.pop(index)

        sent_message = {
            **message,
            "sentAt": utc_now_iso(),
            "status": STATUS_SENT,
        }
        if target_type:
            sent_message["targetType"] = target_type
        sent_message["recipients"] = [build_recipient(d) for d in devices]

        sent = await self.storage.load(Collection.SENT_MESSAGES)
        sent.append(sent_message)

        await self.storage.save_many({
            Collection.PENDING_MESSAGES: pending,
            Collection.SENT_MESSAGES: sent,
        })

        logger.info(f"Message {message['id']} sent to {len(devices)} device(s)")
        return sent_message, len(devices)
