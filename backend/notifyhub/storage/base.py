"""Collection storage interface shared by every backend."""
import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Dict, List

logger = logging.getLogger(__name__)

Record = Dict
Records = List[Record]


class Collection(str, Enum):
    """The four collections the service persists."""

    DEVICES = "devices"
    PENDING_MESSAGES = "pending_messages"
    SENT_MESSAGES = "sent_messages"
    BROADCASTS = "broadcasts"

    @property
    def filename(self) -> str:
        return COLLECTION_FILES[self]

    @property
    def document_key(self) -> str:
        return "devices" if self is Collection.DEVICES else "messages"

    def empty_document(self) -> dict:
        return {self.document_key: []}


COLLECTION_FILES = {
    Collection.DEVICES: "devices.json",
    Collection.PENDING_MESSAGES: "pending-messages.json",
    Collection.SENT_MESSAGES: "sent-messages.json",
    Collection.BROADCASTS: "broadcast-messages.json",
}

# Locks are always taken in this order
LOCK_ORDER = list(Collection)


class BaseStorage(ABC):
    """Whole-collection load/save over one backend.

    ``load`` returns a fresh list the caller may mutate freely; ``save``
    replaces the entire collection. Callers that load, mutate and save
    must hold the collection's lock for the whole cycle (see ``locked``).
    """

    mode: str = "base"

    def __init__(self):
        self._locks = {collection: asyncio.Lock() for collection in Collection}

    async def initialize(self):
        """Prepare the backend. Raises StorageError when it is unusable."""

    async def close(self):
        """Release backend resources."""

    @abstractmethod
    async def load(self, collection: Collection) -> Records:
        """Return every record of a collection in insertion order."""

    @abstractmethod
    async def save(self, collection: Collection, records: Records):
        """Replace a collection with ``records``."""

    async def save_many(self, updates: Dict[Collection, Records]):
        """Replace several collections, in ``LOCK_ORDER``.

        Backends that can commit all of them at once override this.
        """
        for collection in LOCK_ORDER:
            if collection in updates:
                await self.save(collection, updates[collection])

    @asynccontextmanager
    async def locked(self, *collections: Collection) -> AsyncIterator[None]:
        """Hold the locks of ``collections`` for a load-mutate-save cycle."""
        wanted = [c for c in LOCK_ORDER if c in collections]
        acquired = []
        try:
            for collection in wanted:
                await self._locks[collection].acquire()
                acquired.append(collection)
            yield
        finally:
            for collection in reversed(acquired):
                self._locks[collection].release()
