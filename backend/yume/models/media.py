"""Catalog entries: movies, TV shows, their comments and ratings."""

from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from yume.models.base import DocumentModel, UtcDatetime


class MediaType(str, Enum):
    """Kind of catalog entry."""

    MOVIE = "Movie"
    TV_SHOW = "TV Show"


class Episode(DocumentModel):
    episode_number: int
    title: str = ""
    source_url: str = ""
    thumbnail_url: str = ""


class Season(DocumentModel):
    season_number: int
    episodes: list[Episode] = Field(default_factory=list)


class Rating(DocumentModel):
    """One user's star rating. At most one per user per media item."""

    user_id: int
    rating: int = Field(ge=1, le=5)


class MediaComment(DocumentModel):
    """Flat comment on a media page, newest first."""

    id: int
    # Comments written before authors were recorded by id only carry the username
    author_id: int | None = None
    username: str
    text: str
    timestamp: UtcDatetime


class Media(DocumentModel):
    """A movie or TV show in the catalog."""

    id: int
    title: str
    description: str = ""
    poster_url: str = ""
    thumbnail_url: str | None = None  # Landscape thumb, different from the portrait poster
    release_year: int | None = None
    genre: list[str] = Field(default_factory=list)
    type: MediaType = MediaType.MOVIE
    audio_languages: list[str] = Field(default_factory=list)
    subtitle_languages: list[str] = Field(default_factory=list)
    comments: list[MediaComment] = Field(default_factory=list)
    is_protected: bool = False  # DRM protected stream
    license_server_url: str | None = None
    age_rating: str = "G"
    source_url: str | None = None  # Movies only
    seasons: list[Season] = Field(default_factory=list)  # TV shows only
    tags: list[str] = Field(default_factory=list)
    ratings: list[Rating] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _number_legacy_comments(cls, data: Any) -> Any:
        """Give comments stored without an id the next free ids, in stored order.

        Older documents keyed media comments by their timestamp only.
        """
        if not isinstance(data, dict):
            return data
        comments = data.get("comments")
        if not comments:
            return data

        def _stored_id(comment: Any) -> int | None:
            if isinstance(comment, MediaComment):
                return comment.id
            if isinstance(comment, dict):
                return comment.get("id")
            return None

        ids = [_stored_id(c) for c in comments]
        if all(i is not None for i in ids):
            return data

        next_comment_id = max((i for i in ids if isinstance(i, int)), default=0) + 1
        numbered = []
        for comment, stored_id in zip(comments, ids, strict=True):
            if stored_id is None and isinstance(comment, dict):
                comment = {**comment, "id": next_comment_id}
                next_comment_id += 1
            numbered.append(comment)
        return {**data, "comments": numbered}

    def find_episode(self, season_number: int, episode_number: int) -> Episode | None:
        for season in self.seasons:
            if season.season_number != season_number:
                continue
            for episode in season.episodes:
                if episode.episode_number == episode_number:
                    return episode
        return None
