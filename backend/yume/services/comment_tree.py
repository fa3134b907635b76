"""Traversal and single-node mutation of threaded forum comments.

Comments nest through ``replies`` to any depth. Ids are unique across every
post, so at most one node in the whole forest matches a given id and the
traversal stops at the first match. Mutations rebuild only the path from the
root to the changed node; untouched siblings and subtrees are shared with the
previous snapshot.
"""

from collections.abc import Callable, Iterable, Iterator

from yume.models import ForumComment, ForumPost
from yume.services.votes import toggle_vote

# Returns the replacement node, or None to remove the node with its replies
CommentCallback = Callable[[ForumComment], ForumComment | None]


def walk_comments(comments: Iterable[ForumComment]) -> Iterator[ForumComment]:
    """Yield every comment depth-first, parents before their replies."""
    for comment in comments:
        yield comment
        yield from walk_comments(comment.replies)


def find_comment(comments: Iterable[ForumComment], comment_id: int) -> ForumComment | None:
    return next((c for c in walk_comments(comments) if c.id == comment_id), None)


def next_comment_id(posts: Iterable[ForumPost]) -> int:
    """Next free comment id across all posts and nesting depths."""
    return max((c.id for post in posts for c in walk_comments(post.comments)), default=0) + 1


def transform_comment(
    comments: list[ForumComment], comment_id: int, callback: CommentCallback
) -> tuple[list[ForumComment], bool]:
    """Apply ``callback`` to the comment with ``comment_id``.

    Returns the new sibling list and whether the comment was found. When the
    callback returns None the node and its whole subtree are dropped; the
    children are not hoisted. Sibling order is preserved.
    """
    for index, comment in enumerate(comments):
        if comment.id == comment_id:
            replacement = callback(comment)
            kept = [] if replacement is None else [replacement]
            return [*comments[:index], *kept, *comments[index + 1 :]], True

        if comment.replies:
            replies, found = transform_comment(comment.replies, comment_id, callback)
            if found:
                updated = comment.model_copy(update={"replies": replies})
                return [*comments[:index], updated, *comments[index + 1 :]], True

    return comments, False


# --- Node operations ---


def edit_text(text: str) -> CommentCallback:
    return lambda comment: comment.model_copy(update={"text": text})


def delete() -> CommentCallback:
    return lambda comment: None


def vote(user_id: int, like: bool) -> CommentCallback:
    """Toggle a like or dislike; counts are recomputed from the voter lists."""

    def _vote(comment: ForumComment) -> ForumComment:
        liked_by, disliked_by = toggle_vote(comment.liked_by, comment.disliked_by, user_id, like)
        return comment.model_copy(
            update={
                "liked_by": liked_by,
                "disliked_by": disliked_by,
                "likes": len(liked_by),
                "dislikes": len(disliked_by),
            }
        )

    return _vote


def insert_reply(reply: ForumComment) -> CommentCallback:
    """Prepend ``reply``, newest first like top-level comments."""
    return lambda comment: comment.model_copy(update={"replies": [reply, *comment.replies]})
