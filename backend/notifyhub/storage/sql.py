"""Durable storage in a SQL database, one serialized document per collection."""
import json
import logging
from typing import Dict

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..config import Settings
from ..database import close_db, create_engine_for, create_session_factory, init_db
from ..errors import StorageError
from ..models import CollectionDocument
from ..utils.db_utils import retry_on_lock
from .base import BaseStorage, Collection, LOCK_ORDER, Records

logger = logging.getLogger(__name__)


class SqlStorage(BaseStorage):
    """Stores each collection as a JSON document in ``collection_documents``.

    ``save_many`` writes every document in a single transaction, so moving
    a message from pending to sent is all-or-nothing on this backend.
    """

    mode = "database"

    def __init__(self, config: Settings):
        super().__init__()
        self.engine = create_engine_for(config)
        self.session_factory = create_session_factory(self.engine)

    async def initialize(self):
        """Create the table and an empty document for every missing collection."""

        async def create_missing():
            async with self.session_factory() as session:
                result = await session.execute(select(CollectionDocument))
                existing = {row.name: row for row in result.scalars().all()}

                for collection in Collection:
                    row = existing.get(collection.value)
                    if row is None:
                        session.add(CollectionDocument(
                            name=collection.value,
                            document=json.dumps(collection.empty_document()),
                        ))
                        logger.info(f"Created empty document for {collection.value}")
                    else:
                        self._decode(collection, row.document)

                await session.commit()

        try:
            await init_db(self.engine)
            await retry_on_lock(create_missing)
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot initialize database storage: {e}") from e
        logger.info("Using database storage")

    async def close(self):
        await close_db(self.engine)

    async def load(self, collection: Collection) -> Records:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(CollectionDocument).where(CollectionDocument.name == collection.value)
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot read {collection.value}: {e}") from e

        if row is None:
            raise StorageError(f"Document missing: {collection.value}")
        return self._decode(collection, row.document)

    async def save(self, collection: Collection, records: Records):
        await self.save_many({collection: records})

    async def save_many(self, updates: Dict[Collection, Records]):
        documents = {
            collection: json.dumps({collection.document_key: list(updates[collection])})
            for collection in LOCK_ORDER
            if collection in updates
        }

        async def write():
            # A fresh session per attempt, a failed commit leaves the old one unusable
            async with self.session_factory() as session:
                for collection, document in documents.items():
                    row = await session.get(CollectionDocument, collection.value)
                    if row:
                        row.document = document
                    else:
                        session.add(CollectionDocument(name=collection.value, document=document))
                await session.commit()

        try:
            await retry_on_lock(write)
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot write {', '.join(c.value for c in updates)}: {e}") from e


    @staticmethod
    def _decode(collection: Collection, raw: str) -> Records:
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt document for {collection.value}: {e}") from e
        if not isinstance(document, dict):
            raise StorageError(f"Corrupt document for {collection.value}")
        records = document.get(collection.document_key) or []
        if not isinstance(records, list):
            raise StorageError(f"Corrupt document for {collection.value}")
        return records
