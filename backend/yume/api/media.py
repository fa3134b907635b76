"""Catalog routes: browsing, admin content management, comments, ratings, playback."""

from fastapi import APIRouter, Depends, HTTPException

from yume.api.deps import (
    ensure_owner_or_staff,
    get_current_user,
    get_synchronizer,
    require_admin,
    require_user,
)
from yume.api.schemas import (
    CommentText,
    MediaDetail,
    MediaFacets,
    PlaybackSource,
    ProgressRequest,
    RatingRequest,
)
from yume.models import Media, MediaType, User, WatchedItem
from yume.services import media as catalog
from yume.services import profiles, users
from yume.services.entities import get_by_id
from yume.services.media import MediaDraft
from yume.services.profiles import ContinueWatchingEntry
from yume.services.state_sync import StateSynchronizer

router = APIRouter(prefix="/api/media", tags=["media"])


@router.get("", response_model=list[Media])
async def list_media(
    search: str = "",
    genre: str | None = None,
    year: int | None = None,
    audio_language: str | None = None,
    subtitle_language: str | None = None,
    type: MediaType | None = None,
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> list[Media]:
    return catalog.filter_media(
        sync.read().media,
        search=search,
        genre=genre,
        year=year,
        audio_language=audio_language,
        subtitle_language=subtitle_language,
        media_type=type,
    )


@router.get("/facets", response_model=MediaFacets)
async def facets(sync: StateSynchronizer = Depends(get_synchronizer)) -> MediaFacets:
    """Values offered by the browse filters."""
    media = sync.read().media
    return MediaFacets(
        genres=catalog.genres(media),
        audio_languages=catalog.audio_languages(media),
        subtitle_languages=catalog.subtitle_languages(media),
        release_years=catalog.release_years(media),
        available_languages=catalog.AVAILABLE_LANGUAGES,
    )


@router.get("/continue-watching", response_model=list[ContinueWatchingEntry])
async def continue_watching(
    user: User = Depends(require_user), sync: StateSynchronizer = Depends(get_synchronizer)
) -> list[ContinueWatchingEntry]:
    return profiles.continue_watching(sync.read(), user)


@router.get("/{media_id}", response_model=MediaDetail)
async def get_media(
    media_id: int,
    user: User | None = Depends(get_current_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> MediaDetail:
    media = catalog.get_media(sync.read(), media_id)
    return MediaDetail(
        media=media,
        average_rating=catalog.average_rating(media),
        user_rating=catalog.user_rating(media, user.id) if user else None,
    )


@router.post("", response_model=Media, status_code=201)
async def create_media(
    draft: MediaDraft,
    _: User = Depends(require_admin),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> Media:
    doc = sync.update(lambda d: catalog.add_media(d, draft))
    return doc.media[-1]


@router.put("/{media_id}", response_model=Media)
async def update_media(
    media_id: int,
    draft: MediaDraft,
    _: User = Depends(require_admin),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> Media:
    doc = sync.update(lambda d: catalog.update_media(d, media_id, draft))
    return catalog.get_media(doc, media_id)


@router.delete("/{media_id}", status_code=204)
async def delete_media(
    media_id: int,
    _: User = Depends(require_admin),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> None:
    sync.update(lambda d: catalog.delete_media(d, media_id))


@router.post("/{media_id}/comments", response_model=Media, status_code=201)
async def add_comment(
    media_id: int,
    body: CommentText,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> Media:
    doc = sync.update(
        lambda d: catalog.add_media_comment(d, media_id, user, body.text.strip())
    )
    return catalog.get_media(doc, media_id)


@router.put("/{media_id}/comments/{comment_id}", response_model=Media)
async def edit_comment(
    media_id: int,
    comment_id: int,
    body: CommentText,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> Media:
    media = catalog.get_media(sync.read(), media_id)
    comment = get_by_id(media.comments, comment_id, "Comment")
    ensure_owner_or_staff(user, owner_id=comment.author_id)
    doc = sync.update(lambda d: catalog.edit_media_comment(d, media_id, comment_id, body.text))
    return catalog.get_media(doc, media_id)


@router.delete("/{media_id}/comments/{comment_id}", status_code=204)
async def delete_comment(
    media_id: int,
    comment_id: int,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> None:
    media = catalog.get_media(sync.read(), media_id)
    comment = get_by_id(media.comments, comment_id, "Comment")
    ensure_owner_or_staff(user, owner_id=comment.author_id)
    sync.update(lambda d: catalog.delete_media_comment(d, media_id, comment_id))


@router.put("/{media_id}/rating", response_model=MediaDetail)
async def rate(
    media_id: int,
    body: RatingRequest,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> MediaDetail:
    doc = sync.update(lambda d: catalog.rate_media(d, media_id, user.id, body.rating))
    media = catalog.get_media(doc, media_id)
    return MediaDetail(
        media=media, average_rating=catalog.average_rating(media), user_rating=body.rating
    )


@router.post("/{media_id}/progress", status_code=204)
async def track_progress(
    media_id: int,
    body: ProgressRequest,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> None:
    if users.is_override_admin(user):
        return
    catalog.get_media(sync.read(), media_id)
    sync.update(
        lambda d: users.track_media_progress(
            d,
            user.id,
            media_id,
            body.progress,
            body.duration,
            season_number=body.season_number,
            episode_number=body.episode_number,
        )
    )


@router.get("/{media_id}/resume", response_model=WatchedItem | None)
async def resume(
    media_id: int,
    user: User = Depends(require_user),
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> WatchedItem | None:
    return profiles.resume_point(user, catalog.get_media(sync.read(), media_id))


@router.get("/{media_id}/source", response_model=PlaybackSource)
async def playback_source(
    media_id: int,
    season: int | None = None,
    episode: int | None = None,
    sync: StateSynchronizer = Depends(get_synchronizer),
) -> PlaybackSource:
    media = catalog.get_media(sync.read(), media_id)
    url = catalog.playback_source(media, season, episode)
    if url is None:
        raise HTTPException(status_code=404, detail="errorSourceNotFound")
    return PlaybackSource(url=url)
