"""Device registry - upsert-by-token device records."""
import logging
from typing import Optional

from ..errors import ValidationError
from ..storage import BaseStorage, Collection, Records
from ..utils.time_utils import new_id, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM = "android"

# Generated by the registry, never taken from the caller
PROTECTED_FIELDS = ("id", "createdAt", "lastSeen")


def _short(token: str) -> str:
    return f"{token[:16]}..."


def find_by_token(devices: Records, token: str) -> Optional[dict]:
    """Return the device registered with ``token``, if any."""
    for device in devices:
        if device.get("token") == token:
            return device
    return None


def upsert_device(devices: Records, record: dict) -> dict:
    """Insert or update a device in an already-loaded devices list.

    Callers are responsible for holding the devices lock and saving.
    """
    token = record.get("token")
    if not token:
        raise ValidationError("FCM token is required")

    updates = {k: v for k, v in record.items() if k not in PROTECTED_FIELDS}
    now = utc_now_iso()

    existing = find_by_token(devices, token)
    if existing:
        existing.update(updates)
        existing["lastSeen"] = now
        logger.info(f"Device token updated: {_short(token)}")
        return existing

    device = {
        "id": new_id(),
        "token": token,
        "userId": None,
        "platform": DEFAULT_PLATFORM,
        "createdAt": now,
        "lastSeen": now,
    }
    device.update(updates)
    if not device.get("platform"):
        device["platform"] = DEFAULT_PLATFORM
    devices.append(device)
    logger.info(f"New device registered: {_short(token)}")
    return device


class DeviceRegistry:
    """Registers devices and lists them."""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    async def register_device(self, record: dict) -> str:
        """Register a device, or refresh the one already holding its token.

        Any attributes besides the generated ``id``, ``createdAt`` and
        ``lastSeen`` are stored on the record; on re-registration they
        overwrite the stored values, including ``userId``.

        Returns:
            The id of the new or updated device.
        """
        if not record.get("token"):
            raise ValidationError("FCM token is required")

        async with self.storage.locked(Collection.DEVICES):
            devices = await self.storage.load(Collection.DEVICES)
            device = upsert_device(devices, record)
            await self.storage.save(Collection.DEVICES, devices)

        return device["id"]

    async def list_devices(self) -> Records:
        return await self.storage.load(Collection.DEVICES)
