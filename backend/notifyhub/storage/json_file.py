"""Durable storage as one pretty-printed JSON document per collection."""
import json
import logging
import os
import tempfile

from ..errors import StorageError
from .base import BaseStorage, Collection, Records

logger = logging.getLogger(__name__)


class JsonFileStorage(BaseStorage):
    """Stores each collection as ``{"devices": [...]}`` / ``{"messages": [...]}``.

    Writes go to a temporary file in the same directory which then replaces
    the document, so a crash never leaves a half-written document behind.
    ``save_many`` writes the documents one after another: a crash between two
    of them leaves the earlier ones written and the later ones unchanged.
    """

    mode = "file"

    def __init__(self, data_path: str):
        super().__init__()
        self.data_path = data_path

    def path_for(self, collection: Collection) -> str:
        return os.path.join(self.data_path, collection.filename)

    async def initialize(self):
        """Create missing documents and verify existing ones parse."""
        try:
            os.makedirs(self.data_path, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.data_path}: {e}") from e

        for collection in Collection:
            path = self.path_for(collection)
            if not os.path.exists(path):
                self._write_document(collection, [])
                logger.info(f"Created empty document {path}")
            else:
                self._read_document(collection)
        logger.info(f"Using JSON file storage in {self.data_path}")

    async def load(self, collection: Collection) -> Records:
        return self._read_document(collection)

    async def save(self, collection: Collection, records: Records):
        self._write_document(collection, records)

    def _read_document(self, collection: Collection) -> Records:
        path = self.path_for(collection)
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError as e:
            raise StorageError(f"Document missing: {path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read document {path}: {e}") from e

        if not isinstance(document, dict):
            raise StorageError(f"Document {path} is not a JSON object")
        records = document.get(collection.document_key) or []
        if not isinstance(records, list):
            raise StorageError(f"Document {path} has no '{collection.document_key}' list")
        return records

    def _write_document(self, collection: Collection, records: Records):
        path = self.path_for(collection)
        document = {collection.document_key: list(records)}
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.data_path, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Cannot write document {path}: {e}") from e
