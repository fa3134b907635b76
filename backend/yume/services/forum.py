"""Forum mutators and queries: posts, votes and threaded comments."""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from yume.core.errors import NotFoundError
from yume.models import AppDocument, ForumComment, ForumPost, PostCategory, User
from yume.models.base import next_id, utcnow
from yume.services import comment_tree
from yume.services.comment_tree import CommentCallback
from yume.services.entities import get_by_id, remove_by_id, replace_by_id
from yume.services.votes import CommentVote, PostVote, toggle_vote


class PostSort(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    TOP = "top"


def _replace_post(doc: AppDocument, post_id: int, change) -> AppDocument:
    return doc.model_copy(update={"posts": replace_by_id(doc.posts, post_id, change, "Post")})


# --- Post mutators ---


def add_post(
    doc: AppDocument,
    title: str,
    content: str,
    category: PostCategory | str,
    author: User,
    now: datetime | None = None,
) -> AppDocument:
    """Prepend a new post. The author's upvote is counted from the start."""
    post = ForumPost(
        id=next_id(doc.posts),
        title=title,
        content=content,
        category=PostCategory(category),
        author_id=author.id,
        author_username=author.username,
        author_profile_picture_url=author.profile_picture_url,
        author_role=author.role,
        created_at=now or utcnow(),
        is_pinned=False,
        upvotes=1,
        downvotes=0,
        upvoted_by=[author.id],
        downvoted_by=[],
        comments=[],
    )
    return doc.model_copy(update={"posts": [post, *doc.posts]})


def update_post(
    doc: AppDocument, post_id: int, title: str, content: str, category: PostCategory | str
) -> AppDocument:
    changes = {"title": title, "content": content, "category": PostCategory(category)}
    return _replace_post(doc, post_id, lambda p: p.model_copy(update=changes))


def delete_post(doc: AppDocument, post_id: int) -> AppDocument:
    return doc.model_copy(update={"posts": remove_by_id(doc.posts, post_id, "Post")})


def toggle_pin(doc: AppDocument, post_id: int) -> AppDocument:
    return _replace_post(doc, post_id, lambda p: p.model_copy(update={"is_pinned": not p.is_pinned}))


def vote_post(doc: AppDocument, post_id: int, user_id: int, direction: PostVote | str) -> AppDocument:
    """Toggle an up or down vote; a user holds at most one of the two."""
    upvote = PostVote(direction) == PostVote.UP

    def _vote(post: ForumPost) -> ForumPost:
        upvoted_by, downvoted_by = toggle_vote(post.upvoted_by, post.downvoted_by, user_id, upvote)
        return post.model_copy(
            update={
                "upvoted_by": upvoted_by,
                "downvoted_by": downvoted_by,
                "upvotes": len(upvoted_by),
                "downvotes": len(downvoted_by),
            }
        )

    return _replace_post(doc, post_id, _vote)


# --- Comment mutators ---


def _new_comment(doc: AppDocument, author: User, text: str, now: datetime | None) -> ForumComment:
    return ForumComment(
        id=comment_tree.next_comment_id(doc.posts),
        author_id=author.id,
        author_username=author.username,
        author_profile_picture_url=author.profile_picture_url,
        text=text,
        created_at=now or utcnow(),
        likes=1,
        dislikes=0,
        liked_by=[author.id],
        disliked_by=[],
        replies=[],
    )


def _change_comment(
    doc: AppDocument, post_id: int, comment_id: int, callback: CommentCallback
) -> AppDocument:
    def _apply(post: ForumPost) -> ForumPost:
        comments, found = comment_tree.transform_comment(post.comments, comment_id, callback)
        if not found:
            raise NotFoundError(f"Comment {comment_id} not found in post {post_id}")
        return post.model_copy(update={"comments": comments})

    return _replace_post(doc, post_id, _apply)


def add_comment(
    doc: AppDocument, post_id: int, author: User, text: str, now: datetime | None = None
) -> AppDocument:
    """Prepend a top-level comment."""
    comment = _new_comment(doc, author, text, now)
    return _replace_post(
        doc, post_id, lambda p: p.model_copy(update={"comments": [comment, *p.comments]})
    )


def add_reply(
    doc: AppDocument,
    post_id: int,
    parent_comment_id: int,
    author: User,
    text: str,
    now: datetime | None = None,
) -> AppDocument:
    reply = _new_comment(doc, author, text, now)
    return _change_comment(doc, post_id, parent_comment_id, comment_tree.insert_reply(reply))


def edit_comment(doc: AppDocument, post_id: int, comment_id: int, text: str) -> AppDocument:
    return _change_comment(doc, post_id, comment_id, comment_tree.edit_text(text))


def delete_comment(doc: AppDocument, post_id: int, comment_id: int) -> AppDocument:
    """Remove the comment together with all of its replies."""
    return _change_comment(doc, post_id, comment_id, comment_tree.delete())


def vote_comment(
    doc: AppDocument, post_id: int, comment_id: int, user_id: int, direction: CommentVote | str
) -> AppDocument:
    like = CommentVote(direction) == CommentVote.LIKE
    return _change_comment(doc, post_id, comment_id, comment_tree.vote(user_id, like))


# --- Queries ---


def get_post(doc: AppDocument, post_id: int) -> ForumPost:
    return get_by_id(doc.posts, post_id, "Post")


def get_comment(doc: AppDocument, post_id: int, comment_id: int) -> ForumComment:
    comment = comment_tree.find_comment(get_post(doc, post_id).comments, comment_id)
    if comment is None:
        raise NotFoundError(f"Comment {comment_id} not found in post {post_id}")
    return comment


def category_counts(posts: Iterable[ForumPost]) -> dict[str, int]:
    """Number of posts per category, in the fixed category order."""
    counts = {category.value: 0 for category in PostCategory}
    for post in posts:
        counts[post.category.value] += 1
    return counts


def list_posts(
    posts: list[ForumPost],
    category: PostCategory | str | None = None,
    author_id: int | None = None,
    sort: PostSort | str = PostSort.NEWEST,
) -> list[ForumPost]:
    """Community listing: filter by author or category, sort, pinned posts on top."""
    if author_id is not None:
        selected = [p for p in posts if p.author_id == author_id]
    elif category:
        selected = [p for p in posts if p.category == PostCategory(category)]
    else:
        selected = list(posts)

    sort = PostSort(sort)
    if sort == PostSort.NEWEST:
        selected.sort(key=lambda p: p.created_at, reverse=True)
    elif sort == PostSort.OLDEST:
        selected.sort(key=lambda p: p.created_at)
    else:
        selected.sort(key=lambda p: p.score, reverse=True)

    # Stable: keeps the chosen order within pinned and unpinned groups
    selected.sort(key=lambda p: not p.is_pinned)
    return selected
