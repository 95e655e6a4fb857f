"""Users derived from devices grouped by their owning userId.

There is no user collection: a user exists exactly as long as at least one
device carries its id.
"""
import logging
from typing import Dict, List

from ..errors import NotFoundError, ValidationError
from ..storage import BaseStorage, Collection, Records
from ..utils.time_utils import utc_now_iso
from .device_registry import find_by_token, upsert_device

logger = logging.getLogger(__name__)


def build_user(user_id: str, devices: Records) -> dict:
    """Summarize the devices owned by one user."""
    name = next((d.get("userName") for d in devices if d.get("userName")), None)
    email = next((d.get("email") for d in devices if d.get("email")), None)
    platforms: List[str] = []
    for device in devices:
        platform = device.get("platform")
        if platform and platform not in platforms:
            platforms.append(platform)
    last_seen = max((d.get("lastSeen") or "" for d in devices), default="") or None

    return {
        "id": user_id,
        "name": name or user_id,
        "email": email,
        "deviceCount": len(devices),
        "devices": [d.get("id") for d in devices],
        "platforms": platforms,
        "lastSeen": last_seen,
    }


def group_by_user(devices: Records) -> Dict[str, Records]:
    """Group devices by userId, keeping first-seen order. Devices without one are skipped."""
    groups: Dict[str, Records] = {}
    for device in devices:
        user_id = device.get("userId")
        if not user_id:
            continue
        groups.setdefault(user_id, []).append(device)
    return groups


class UserView:
    """Read-only user projection over the device registry, plus user-level updates."""

    def __init__(self, storage: BaseStorage):
        self.storage = storage

    async def list_users(self) -> List[dict]:
        devices = await self.storage.load(Collection.DEVICES)
        return [build_user(user_id, owned) for user_id, owned in group_by_user(devices).items()]

    async def get_user_devices(self, user_id: str) -> Records:
        devices = await self.storage.load(Collection.DEVICES)
        owned = [d for d in devices if d.get("userId") == user_id]
        if not owned:
            raise NotFoundError("User not found")
        return owned

    async def get_user(self, user_id: str) -> dict:
        return build_user(user_id, await self.get_user_devices(user_id))

    async def upsert_user(self, record: dict) -> dict:
        """Create or update a user through its devices.

        A user without devices is created by registering the supplied token
        for it. For an existing user, display name and email are written to
        every device it owns. A new token rotates the token of a user's only
        device when no other device holds it; otherwise the token is
        registered for the user like any device registration.
        """
        user_id = record.get("id") or record.get("userId")
        if not user_id:
            raise ValidationError("User ID is required")

        token = record.get("token")
        profile = {}
        if record.get("name"):
            profile["userName"] = record["name"]
        if record.get("email"):
            profile["email"] = record["email"]

        async with self.storage.locked(Collection.DEVICES):
            devices = await self.storage.load(Collection.DEVICES)
            owned = [d for d in devices if d.get("userId") == user_id]

            if not owned:
                if token:
                    device = {"token": token, "userId": user_id, **profile}
                    if record.get("platform"):
                        device["platform"] = record["platform"]
                    owned = [upsert_device(devices, device)]
                    logger.info(f"User {user_id} created with device {owned[0]['id']}")
                else:
                    logger.warning(f"User {user_id} has no devices and no token was given, nothing to update")
            else:
                now = utc_now_iso()
                for device in owned:
                    device.update(profile)
                    device["lastSeen"] = now

                if token and token not in [d.get("token") for d in owned]:
                    holder = find_by_token(devices, token)
                    if len(owned) == 1 and holder is None:
                        owned[0]["token"] = token
                        logger.info(f"Token rotated for user {user_id}")
                    else:
                        device = upsert_device(devices, {"token": token, "userId": user_id, **profile})
                        owned.append(device)
                logger.info(f"User {user_id} updated on {len(owned)} device(s)")

            await self.storage.save(Collection.DEVICES, devices)

        return {
            "userId": user_id,
            "deviceIds": [d["id"] for d in owned],
        }
