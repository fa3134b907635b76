"""Two-sided voting with per-user mutual exclusion.

Used for post up/down votes and comment likes/dislikes. A user holds at most
one side at a time; voting the side they already hold withdraws the vote.
"""

from enum import Enum


class PostVote(str, Enum):
    UP = "up"
    DOWN = "down"


class CommentVote(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


def toggle_vote(
    positive: list[int], negative: list[int], user_id: int, on_positive: bool
) -> tuple[list[int], list[int]]:
    """Toggle ``user_id`` on one side and clear it from the other.

    Returns new (positive, negative) lists; the inputs are not modified.
    """
    chosen, other = (positive, negative) if on_positive else (negative, positive)
    if user_id in chosen:
        chosen = [voter for voter in chosen if voter != user_id]
    else:
        chosen = [*chosen, user_id]
        other = [voter for voter in other if voter != user_id]
    return (chosen, other) if on_positive else (other, chosen)
