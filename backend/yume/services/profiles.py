"""Read models for the home page and user profiles."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from yume.models import AppDocument, Media, MediaComment, MediaType, User, WatchedItem
from yume.services.comment_tree import walk_comments
from yume.services.media import FINISHED_FRACTION


class ContinueWatchingEntry(BaseModel):
    media: Media
    watched: WatchedItem


class ActivityItem(BaseModel):
    """One entry of a user's public activity feed."""

    type: Literal["media-comment", "forum-post", "forum-comment"]
    title: str  # Media or post title
    target_id: int  # Media or post id
    text: str | None = None
    timestamp: datetime


def continue_watching(doc: AppDocument, user: User) -> list[ContinueWatchingEntry]:
    """Latest watch entry per media item, most recent first.

    Entries for media that has since been removed from the catalog are skipped.
    """
    media_by_id = {m.id: m for m in doc.media}
    latest: dict[int, WatchedItem] = {}
    for item in sorted(user.recently_watched, key=lambda w: w.watched_at, reverse=True):
        latest.setdefault(item.media_id, item)

    return [
        ContinueWatchingEntry(media=media_by_id[item.media_id], watched=item)
        for item in latest.values()
        if item.media_id in media_by_id
    ]


def resume_point(user: User, media: Media) -> WatchedItem | None:
    """Where to resume: the movie position, or the last TV episode watched.

    Nothing is offered once the title is practically finished.
    """
    history = [w for w in user.recently_watched if w.media_id == media.id]
    if not history:
        return None
    if media.type == MediaType.MOVIE:
        item = history[0]
    else:
        item = max(history, key=lambda w: w.watched_at)
    if item.fraction_watched > FINISHED_FRACTION:
        return None
    return item


def _wrote(comment: MediaComment, user: User) -> bool:
    if comment.author_id is not None:
        return comment.author_id == user.id
    # Older comments only record the username
    return comment.username == user.username


def user_activity(doc: AppDocument, user: User) -> list[ActivityItem]:
    """Media comments, forum posts and forum comments at any depth, newest first."""
    activity = [
        ActivityItem(
            type="media-comment",
            title=media.title,
            target_id=media.id,
            text=comment.text,
            timestamp=comment.timestamp,
        )
        for media in doc.media
        for comment in media.comments
        if _wrote(comment, user)
    ]
    for post in doc.posts:
        if post.author_id == user.id:
            activity.append(
                ActivityItem(
                    type="forum-post", title=post.title, target_id=post.id, timestamp=post.created_at
                )
            )
        activity.extend(
            ActivityItem(
                type="forum-comment",
                title=post.title,
                target_id=post.id,
                text=comment.text,
                timestamp=comment.created_at,
            )
            for comment in walk_comments(post.comments)
            if comment.author_id == user.id
        )
    return sorted(activity, key=lambda a: a.timestamp, reverse=True)
