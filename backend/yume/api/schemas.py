"""Request and response bodies for the HTTP API.

Bodies use the same camelCase keys as the stored document.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from yume.models import (
    MaintenanceMode,
    Media,
    PostCategory,
    Role,
    User,
    WatchedItem,
)
from yume.services.votes import CommentVote, PostVote


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Accounts ---


class RegisterRequest(ApiModel):
    username: str
    email: str
    password: str


class ResendRequest(ApiModel):
    email: str


class LoginRequest(ApiModel):
    username: str
    password: str


class ProfileUpdate(ApiModel):
    username: str | None = None
    password: str | None = None
    profile_picture_url: str | None = None


class PasswordChange(ApiModel):
    current_password: str
    new_password: str
    confirm_password: str


class AdminUserUpdate(ApiModel):
    username: str
    email: str
    password: str | None = None
    profile_picture_url: str | None = None


class RoleUpdate(ApiModel):
    role: Role


class PublicUser(ApiModel):
    """A user record without the password."""

    id: int
    username: str
    email: str
    role: Role
    recently_watched: list[WatchedItem] = Field(default_factory=list)
    profile_picture_url: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            role=user.role,
            recently_watched=user.recently_watched,
            profile_picture_url=user.profile_picture_url,
        )


# --- Media ---


class CommentText(ApiModel):
    text: str = Field(min_length=1)


class RatingRequest(ApiModel):
    rating: int = Field(ge=1, le=5)


class ProgressRequest(ApiModel):
    progress: float = Field(ge=0)
    duration: float = Field(ge=0)
    season_number: int | None = None
    episode_number: int | None = None


class MediaDetail(ApiModel):
    media: Media
    average_rating: float
    user_rating: int | None = None


class MediaFacets(ApiModel):
    genres: list[str]
    audio_languages: list[str]
    subtitle_languages: list[str]
    release_years: list[int]
    available_languages: list[str]


class PlaybackSource(ApiModel):
    url: str


# --- Forum ---


class PostInput(ApiModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: PostCategory


class PostVoteRequest(ApiModel):
    vote: PostVote


class CommentVoteRequest(ApiModel):
    vote: CommentVote


# --- Settings ---


class SiteSettingsUpdate(ApiModel):
    site_name: str | None = None
    maintenance_mode: MaintenanceMode | None = None


class PlayerSettingsUpdate(ApiModel):
    auto_play: bool | None = None
    auto_next: bool | None = None
