"""Services for device registration, message delivery bookkeeping and receipts."""
from .device_registry import DeviceRegistry
from .user_view import UserView
from .message_lifecycle import MessageLifecycle
from .receipt_tracker import ReceiptTracker
from .broadcast_manager import BroadcastManager

__all__ = ["DeviceRegistry", "UserView", "MessageLifecycle", "ReceiptTracker", "BroadcastManager"]
