"""Volatile in-memory storage - contents are lost when the process exits."""
import copy
import logging
from typing import Dict

from .base import BaseStorage, Collection, Records

logger = logging.getLogger(__name__)


class MemoryStorage(BaseStorage):
    """Keeps each collection in a per-instance table.

    Records are deep-copied in both directions so callers get the same
    value semantics as from the durable backends.
    """

    mode = "memory"

    def __init__(self, initial: Dict[Collection, Records] | None = None):
        super().__init__()
        self._tables: Dict[Collection, Records] = {collection: [] for collection in Collection}
        for collection, records in (initial or {}).items():
            self._tables[Collection(collection)] = copy.deepcopy(list(records))

    async def initialize(self):
        logger.info("Using in-memory storage (data is not persisted)")

    async def load(self, collection: Collection) -> Records:
        return copy.deepcopy(self._tables[collection])

    async def save(self, collection: Collection, records: Records):
        self._tables[collection] = copy.deepcopy(list(records))

    async def save_many(self, updates: Dict[Collection, Records]):
        # Copy everything first so a failure leaves every table untouched
        staged = {collection: copy.deepcopy(list(records)) for collection, records in updates.items()}
        self._tables.update(staged)
