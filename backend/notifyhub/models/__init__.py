"""Database models."""
from .collection_document import CollectionDocument

__all__ = ["CollectionDocument"]
