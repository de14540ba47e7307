"""Shared base for persisted marketplace records."""

from datetime import datetime, timezone

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class MarketRecord(BaseModel):
    """Base model for JSON documents stored by the record store.

    Attributes are snake_case in Python and camelCase on the wire.
    """

    class Config:
        """Pydantic model configuration."""
        alias_generator = to_camel
        populate_by_name = True

    def to_document(self) -> dict:
        """Serialize to a JSON-compatible dict using wire field names."""
        return self.model_dump(mode="json", by_alias=True)
