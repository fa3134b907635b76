"""User accounts, pending registrations and watch history."""

from enum import Enum

from pydantic import Field

from yume.models.base import DocumentModel, UtcDatetime

RECENTLY_WATCHED_LIMIT = 24


class Role(str, Enum):
    """Account roles, lowest to highest privilege."""

    USER = "user"
    MOD = "mod"
    ADMIN = "admin"


class WatchedItem(DocumentModel):
    """Playback position for a movie or a single episode."""

    media_id: int
    watched_at: UtcDatetime
    progress: float  # seconds
    duration: float  # seconds
    # Only set for TV shows
    season_number: int | None = None
    episode_number: int | None = None

    @property
    def key(self) -> tuple[int, int | None, int | None]:
        """Upsert identity: the same movie or the same episode."""
        return (self.media_id, self.season_number, self.episode_number)

    @property
    def fraction_watched(self) -> float:
        if not self.duration:
            return 0.0
        return self.progress / self.duration


class User(DocumentModel):
    """A verified account."""

    id: int
    username: str
    email: str
    # Plaintext, compared as an opaque string. Must become a salted hash before real use.
    password: str
    role: Role = Role.USER
    recently_watched: list[WatchedItem] = Field(default_factory=list)
    profile_picture_url: str | None = None

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.ADMIN, Role.MOD)


class PendingUser(DocumentModel):
    """A registration waiting for email verification."""

    username: str
    email: str
    password: str
    profile_picture_url: str | None = None
    verification_token: str
    token_expires: UtcDatetime
