"""Catalog mutators and queries: media items, their comments and ratings."""

from datetime import datetime

from pydantic import Field

from yume.models import AppDocument, Media, MediaComment, MediaType, Rating, Season, User
from yume.models.base import DocumentModel, next_id, utcnow
from yume.services.entities import get_by_id, remove_by_id, replace_by_id

AVAILABLE_LANGUAGES = sorted(
    [
        "English",
        "Spanish",
        "French",
        "German",
        "Japanese",
        "Korean",
        "Mandarin",
        "Cantonese",
        "Italian",
        "Portuguese",
        "Russian",
        "Hindi",
        "Arabic",
    ]
)

# A title counts as finished past this fraction; it is no longer offered for resume
FINISHED_FRACTION = 0.95


class MediaDraft(DocumentModel):
    """Descriptive fields of a media item as edited in the admin panel."""

    title: str = Field(min_length=1)
    description: str = ""
    poster_url: str = ""
    thumbnail_url: str | None = None
    release_year: int | None = None
    genre: list[str] = Field(default_factory=list)
    type: MediaType = MediaType.MOVIE
    audio_languages: list[str] = Field(default_factory=list)
    subtitle_languages: list[str] = Field(default_factory=list)
    is_protected: bool = False
    license_server_url: str | None = None
    age_rating: str = "G"
    source_url: str | None = None
    seasons: list[Season] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    def descriptive_fields(self) -> dict:
        """Field values with the movie / TV show split enforced."""
        fields = {name: getattr(self, name) for name in MediaDraft.model_fields}
        if self.type == MediaType.MOVIE:
            fields["seasons"] = []
        else:
            fields["source_url"] = None
        if not self.is_protected:
            fields["license_server_url"] = None
        return fields


def _replace_media(doc: AppDocument, media_id: int, change) -> AppDocument:
    return doc.model_copy(update={"media": replace_by_id(doc.media, media_id, change, "Media")})


# --- Mutators ---


def add_media(doc: AppDocument, draft: MediaDraft) -> AppDocument:
    media = Media(id=next_id(doc.media), comments=[], ratings=[], **draft.descriptive_fields())
    return doc.model_copy(update={"media": [*doc.media, media]})


def update_media(doc: AppDocument, media_id: int, draft: MediaDraft) -> AppDocument:
    """Replace descriptive fields; id, comments and ratings are kept."""
    return _replace_media(
        doc, media_id, lambda m: m.model_copy(update=draft.descriptive_fields())
    )


def delete_media(doc: AppDocument, media_id: int) -> AppDocument:
    return doc.model_copy(update={"media": remove_by_id(doc.media, media_id, "Media")})


def add_media_comment(
    doc: AppDocument, media_id: int, author: User, text: str, now: datetime | None = None
) -> AppDocument:
    def _add(media: Media) -> Media:
        comment = MediaComment(
            id=next_id(media.comments),
            author_id=author.id,
            username=author.username,
            text=text,
            timestamp=now or utcnow(),
        )
        return media.model_copy(update={"comments": [comment, *media.comments]})

    return _replace_media(doc, media_id, _add)


def edit_media_comment(doc: AppDocument, media_id: int, comment_id: int, text: str) -> AppDocument:
    def _edit(media: Media) -> Media:
        comments = replace_by_id(
            media.comments, comment_id, lambda c: c.model_copy(update={"text": text}), "Comment"
        )
        return media.model_copy(update={"comments": comments})

    return _replace_media(doc, media_id, _edit)


def delete_media_comment(doc: AppDocument, media_id: int, comment_id: int) -> AppDocument:
    def _delete(media: Media) -> Media:
        return media.model_copy(
            update={"comments": remove_by_id(media.comments, comment_id, "Comment")}
        )

    return _replace_media(doc, media_id, _delete)


def rate_media(doc: AppDocument, media_id: int, user_id: int, rating: int) -> AppDocument:
    """Set the user's rating, replacing any earlier rating by the same user."""
    new_rating = Rating(user_id=user_id, rating=rating)

    def _rate(media: Media) -> Media:
        ratings = [r for r in media.ratings if r.user_id != user_id]
        return media.model_copy(update={"ratings": [*ratings, new_rating]})

    return _replace_media(doc, media_id, _rate)


# --- Queries ---


def get_media(doc: AppDocument, media_id: int) -> Media:
    return get_by_id(doc.media, media_id, "Media")


def genres(media: list[Media]) -> list[str]:
    return sorted({g for m in media for g in m.genre})


def audio_languages(media: list[Media]) -> list[str]:
    return sorted({lang for m in media for lang in m.audio_languages})


def subtitle_languages(media: list[Media]) -> list[str]:
    return sorted({lang for m in media for lang in m.subtitle_languages})


def release_years(media: list[Media]) -> list[int]:
    """Distinct years, newest first."""
    return sorted({m.release_year for m in media if m.release_year is not None}, reverse=True)


def filter_media(
    media: list[Media],
    search: str = "",
    genre: str | None = None,
    year: int | None = None,
    audio_language: str | None = None,
    subtitle_language: str | None = None,
    media_type: MediaType | None = None,
) -> list[Media]:
    """Browse filters; every given criterion must match."""
    term = search.strip().lower()
    return [
        m
        for m in media
        if term in m.title.lower()
        and (not genre or genre in m.genre)
        and (not year or m.release_year == year)
        and (not audio_language or audio_language in m.audio_languages)
        and (not subtitle_language or subtitle_language in m.subtitle_languages)
        and (not media_type or m.type == media_type)
    ]


def average_rating(media: Media) -> float:
    """Mean rating rounded to one decimal, 0 when unrated."""
    if not media.ratings:
        return 0.0
    return round(sum(r.rating for r in media.ratings) / len(media.ratings), 1)


def user_rating(media: Media, user_id: int) -> int | None:
    return next((r.rating for r in media.ratings if r.user_id == user_id), None)


def playback_source(
    media: Media, season_number: int | None = None, episode_number: int | None = None
) -> str | None:
    """Stream URL for a movie, or for one episode of a TV show."""
    if media.type == MediaType.MOVIE:
        return media.source_url or None
    if season_number is None or episode_number is None:
        return None
    episode = media.find_episode(season_number, episode_number)
    return episode.source_url if episode and episode.source_url else None
