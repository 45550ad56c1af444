"""Key-value row model backing SqlKeyValueStorage."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class StoredValue(SQLModel, table=True):
    """One persisted entity, JSON-encoded, under a fixed key."""

    key: str = Field(primary_key=True)
    value: bytes
    updated_at: datetime = Field(default_factory=datetime.utcnow)
