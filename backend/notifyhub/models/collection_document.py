"""CollectionDocument model - one serialized collection per row."""
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime

from ..database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class CollectionDocument(Base):
    """A whole collection stored as a single JSON document."""

    __tablename__ = "collection_documents"

    name = Column(String(64), primary_key=True)
    document = Column(Text, nullable=False)  # {"devices": [...]} or {"messages": [...]}
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
