"""FastAPI dependencies that bind services to the application's storage."""
from fastapi import Depends

from .services import BroadcastManager, DeviceRegistry, MessageLifecycle, ReceiptTracker, UserView
from .storage import BaseStorage, get_storage


def get_device_registry(storage: BaseStorage = Depends(get_storage)) -> DeviceRegistry:
    return DeviceRegistry(storage)


def get_user_view(storage: BaseStorage = Depends(get_storage)) -> UserView:
    return UserView(storage)


def get_message_lifecycle(storage: BaseStorage = Depends(get_storage)) -> MessageLifecycle:
    return MessageLifecycle(storage)


def get_receipt_tracker(storage: BaseStorage = Depends(get_storage)) -> ReceiptTracker:
    return ReceiptTracker(storage)


def get_broadcast_manager(storage: BaseStorage = Depends(get_storage)) -> BroadcastManager:
    return BroadcastManager(storage)
