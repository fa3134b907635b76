"""The single persisted aggregate."""

from typing import Any

from pydantic import Field, field_validator

from yume.models.base import DocumentModel
from yume.models.forum import ForumPost
from yume.models.media import Media
from yume.models.site_settings import SiteSettings
from yume.models.user import PendingUser, User


class AppDocument(DocumentModel):
    """Everything the application persists, stored as one JSON document."""

    users: list[User] = Field(default_factory=list)
    pending_users: list[PendingUser] = Field(default_factory=list)
    media: list[Media] = Field(default_factory=list)
    posts: list[ForumPost] = Field(default_factory=list)  # Newest first
    settings: SiteSettings = Field(default_factory=SiteSettings)

    @field_validator("users", "pending_users", "media", "posts", mode="before")
    @classmethod
    def _null_collection_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("settings", mode="before")
    @classmethod
    def _null_settings_use_defaults(cls, value: Any) -> Any:
        return {} if value is None else value

    @classmethod
    def empty(cls) -> "AppDocument":
        return cls()

    def to_json(self) -> dict[str, Any]:
        """Serialize with the stored (camelCase) keys and ISO-8601 instants."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
