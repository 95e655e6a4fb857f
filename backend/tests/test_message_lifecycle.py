"""Tests for the pending -> sent message lifecycle and fan-out."""
import pytest

from notifyhub.errors import NotFoundError, StorageError, ValidationError
from notifyhub.services import DeviceRegistry, MessageLifecycle
from notifyhub.storage import Collection


@pytest.fixture
def registry(memory_storage):
    return DeviceRegistry(memory_storage)


@pytest.fixture
def lifecycle(memory_storage):
    return MessageLifecycle(memory_storage)


# =============================================================================
# Compose
# =============================================================================


class TestCreateMessage:
    """Pending message creation."""

    @pytest.mark.asyncio
    async def test_creates_pending_record(self, lifecycle):
        message = await lifecycle.create_message("A", "B", {"screen": "inbox"})

        assert message["status"] == "pending"
        assert message["data"] == {"screen": "inbox"}
        assert message["id"]
        assert message["createdAt"].endswith("Z")
        assert await lifecycle.list_pending() == [message]

    @pytest.mark.asyncio
    async def test_data_defaults_to_empty(self, lifecycle):
        message = await lifecycle.create_message("A", "B")
        assert message["data"] == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,body", [(None, "B"), ("A", None), ("", "B"), ("A", "")])
    async def test_title_and_body_required(self, lifecycle, title, body):
        with pytest.raises(ValidationError):
            await lifecycle.create_message(title, body)
        assert await lifecycle.list_pending() == []

    @pytest.mark.asyncio
    async def test_pending_keeps_insertion_order(self, lifecycle):
        ids = [(await lifecycle.create_message(f"t{i}", "b"))["id"] for i in range(3)]
        assert [m["id"] for m in await lifecycle.list_pending()] == ids


# =============================================================================
# Send to all
# =============================================================================


class TestSendMessage:
    """Broadcast-style send of a pending message."""

    @pytest.mark.asyncio
    async def test_moves_message_to_sent(self, registry, lifecycle):
        device_id = await registry.register_device({"token": "t1", "userId": "u1"})
        message = await lifecycle.create_message("A", "B")

        sent_message = await lifecycle.send_message(message["id"])

        assert await lifecycle.list_pending() == []
        sent = await lifecycle.list_sent()
        assert [m["id"] for m in sent] == [message["id"]]
        assert sent_message["status"] == "sent"
        assert sent_message["sentAt"]
        assert sent_message["title"] == "A"
        assert sent_message["createdAt"] == message["createdAt"]
        assert "targetType" not in sent_message
        assert sent_message["recipients"] == [{
            "deviceId": device_id,
            "token": "t1",
            "userId": "u1",
            "status": "sent",
            "readAt": None,
        }]

    @pytest.mark.asyncio
    async def test_recipient_snapshot_ignores_later_devices(self, registry, lifecycle):
        await registry.register_device({"token": "t1"})
        await registry.register_device({"token": "t2"})
        message = await lifecycle.create_message("A", "B")
        await lifecycle.send_message(message["id"])

        await registry.register_device({"token": "t3"})
        await registry.register_device({"token": "t1", "userId": "u9"})

        recipients = (await lifecycle.list_sent())[0]["recipients"]
        assert len(recipients) == 2
        assert recipients[0]["userId"] is None

    @pytest.mark.asyncio
    async def test_cannot_send_twice(self, registry, lifecycle):
        await registry.register_device({"token": "t1"})
        message = await lifecycle.create_message("A", "B")
        await lifecycle.send_message(message["id"])

        with pytest.raises(NotFoundError, match="Message not found"):
            await lifecycle.send_message(message["id"])
        assert len(await lifecycle.list_sent()) == 1

    @pytest.mark.asyncio
    async def test_no_devices_checked_before_message(self, lifecycle):
        with pytest.raises(NotFoundError, match="No devices registered"):
            await lifecycle.send_message("does-not-exist")

    @pytest.mark.asyncio
    async def test_no_devices_leaves_message_pending(self, lifecycle):
        message = await lifecycle.create_message("A", "B")

        with pytest.raises(NotFoundError, match="No devices registered"):
            await lifecycle.send_message(message["id"])
        assert len(await lifecycle.list_pending()) == 1

    @pytest.mark.asyncio
    async def test_unknown_message(self, registry, lifecycle):
        await registry.register_device({"token": "t1"})

        with pytest.raises(NotFoundError, match="Message not found"):
            await lifecycle.send_message("nope")

    @pytest.mark.asyncio
    async def test_message_id_required(self, lifecycle):
        with pytest.raises(ValidationError):
            await lifecycle.send_message(None)

    @pytest.mark.asyncio
    async def test_only_selected_message_leaves_pending(self, registry, lifecycle):
        await registry.register_device({"token": "t1"})
        first = await lifecycle.create_message("A", "B")
        second = await lifecycle.create_message("C", "D")

        await lifecycle.send_message(second["id"])

        assert [m["id"] for m in await lifecycle.list_pending()] == [first["id"]]


# =============================================================================
# Targeted send
# =============================================================================


class TestSendTargeted:
    """Send to the devices of selected users."""

    @pytest.mark.asyncio
    async def test_selects_devices_of_target_users(self, registry, lifecycle):
        a = await registry.register_device({"token": "t1", "userId": "u1"})
        await registry.register_device({"token": "t2", "userId": "u2"})
        c = await registry.register_device({"token": "t3", "userId": "u1"})
        message = await lifecycle.create_message("A", "B")

        sent_message, count = await lifecycle.send_targeted(message["id"], ["u1"])

        assert count == 2
        assert sent_message["targetType"] == "specific"
        assert [r["deviceId"] for r in sent_message["recipients"]] == [a, c]
        assert await lifecycle.list_pending() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("targets", [None, []])
    async def test_no_targets_means_all_devices(self, registry, lifecycle, targets):
        await registry.register_device({"token": "t1", "userId": "u1"})
        await registry.register_device({"token": "t2"})
        message = await lifecycle.create_message("A", "B")

        sent_message, count = await lifecycle.send_targeted(message["id"], targets)

        assert count == 2
        assert sent_message["targetType"] == "all"

    @pytest.mark.asyncio
    async def test_no_matching_devices_keeps_message_pending(self, registry, lifecycle):
        await registry.register_device({"token": "t1", "userId": "u1"})
        message = await lifecycle.create_message("A", "B")

        with pytest.raises(NotFoundError, match="No matching devices"):
            await lifecycle.send_targeted(message["id"], ["u9"])

        assert [m["id"] for m in await lifecycle.list_pending()] == [message["id"]]
        assert await lifecycle.list_sent() == []

    @pytest.mark.asyncio
    async def test_unknown_message_checked_before_devices(self, lifecycle):
        with pytest.raises(NotFoundError, match="Message not found"):
            await lifecycle.send_targeted("nope", ["u1"])

    @pytest.mark.asyncio
    async def test_empty_registry_with_existing_message(self, lifecycle):
        message = await lifecycle.create_message("A", "B")

        with pytest.raises(NotFoundError, match="No matching devices"):
            await lifecycle.send_targeted(message["id"])
        assert len(await lifecycle.list_pending()) == 1

    @pytest.mark.asyncio
    async def test_message_id_required(self, lifecycle):
        with pytest.raises(ValidationError):
            await lifecycle.send_targeted("", ["u1"])


# =============================================================================
# Storage interaction
# =============================================================================


class TestSendAcrossBackends:
    """The send transition on every storage backend."""

    @pytest.mark.asyncio
    async def test_message_present_exactly_once(self, storage):
        registry = DeviceRegistry(storage)
        lifecycle = MessageLifecycle(storage)
        await registry.register_device({"token": "t1"})
        message = await lifecycle.create_message("A", "B")

        await lifecycle.send_message(message["id"])

        assert await storage.load(Collection.PENDING_MESSAGES) == []
        sent = await storage.load(Collection.SENT_MESSAGES)
        assert [m["id"] for m in sent] == [message["id"]]


class TestFileBackendCrashWindow:
    """The JSON file backend writes pending before sent."""

    @pytest.mark.asyncio
    async def test_failed_sent_write_loses_message(self, json_storage, monkeypatch):
        registry = DeviceRegistry(json_storage)
        lifecycle = MessageLifecycle(json_storage)
        await registry.register_device({"token": "t1"})
        message = await lifecycle.create_message("A", "B")

        original = json_storage._write_document

        def failing_write(collection, records):
            if collection is Collection.SENT_MESSAGES:
                raise StorageError("disk full")
            original(collection, records)

        monkeypatch.setattr(json_storage, "_write_document", failing_write)

        with pytest.raises(StorageError):
            await lifecycle.send_message(message["id"])

        # Removed from pending, never appended to sent
        assert await json_storage.load(Collection.PENDING_MESSAGES) == []
        assert await json_storage.load(Collection.SENT_MESSAGES) == []
