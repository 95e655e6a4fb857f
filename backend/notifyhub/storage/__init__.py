"""Collection storage backends."""
from fastapi import Request

from ..config import Settings
from .base import BaseStorage, Collection, Records
from .json_file import JsonFileStorage
from .memory import MemoryStorage


def create_storage(config: Settings) -> BaseStorage:
    """Build the backend selected by STORAGE_MODE."""
    if config.storage_mode == "memory":
        return MemoryStorage()
    if config.storage_mode == "database":
        from .sql import SqlStorage
        return SqlStorage(config)
    return JsonFileStorage(config.data_path)


def get_storage(request: Request) -> BaseStorage:
    """Dependency to get the application's storage backend."""
    return request.app.state.storage


__all__ = [
    "BaseStorage",
    "Collection",
    "Records",
    "JsonFileStorage",
    "MemoryStorage",
    "create_storage",
    "get_storage",
]
