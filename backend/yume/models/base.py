"""Shared base for every entity stored in the remote document.

The document keeps the camelCase keys of the web client that writes it
(``recentlyWatched``, ``pendingUsers``); Python code uses snake_case names.
Models are frozen: a change always produces a new object via ``model_copy``.
"""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Current instant, timezone-aware (UTC)."""
    return datetime.now(UTC)


def _ensure_utc(value: datetime) -> datetime:
    # Stored instants written without an offset are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


UtcDatetime = Annotated[datetime, AfterValidator(_ensure_utc)]


class DocumentModel(BaseModel):
    """Base model for document entities."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",  # Keep fields written by newer clients
    )


def next_id(items) -> int:
    """Return ``max(existing ids, 0) + 1`` for a collection of entities."""
    return max((item.id for item in items), default=0) + 1
