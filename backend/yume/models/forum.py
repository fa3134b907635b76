"""Community forum: posts and their threaded comments."""

from enum import Enum

from pydantic import Field

from yume.models.base import DocumentModel, UtcDatetime
from yume.models.user import Role


class PostCategory(str, Enum):
    """Fixed set of forum categories."""

    GENERAL = "General"
    UPDATES = "Updates"
    RECOMMENDATIONS = "Recommendations"
    DISCUSSION = "Discussion"


class ForumComment(DocumentModel):
    """A comment or reply. Ids are unique across every post and nesting depth."""

    id: int
    author_id: int
    author_username: str
    author_profile_picture_url: str | None = None
    text: str
    created_at: UtcDatetime
    likes: int = 0
    dislikes: int = 0
    liked_by: list[int] = Field(default_factory=list)
    disliked_by: list[int] = Field(default_factory=list)
    replies: list["ForumComment"] = Field(default_factory=list)


class ForumPost(DocumentModel):
    """A forum thread."""

    id: int
    title: str
    content: str
    author_id: int
    author_username: str
    author_profile_picture_url: str | None = None
    author_role: Role = Role.USER
    category: PostCategory
    created_at: UtcDatetime
    is_pinned: bool = False
    # Derived from the voter lists, recomputed on every vote
    upvotes: int = 0
    downvotes: int = 0
    upvoted_by: list[int] = Field(default_factory=list)
    downvoted_by: list[int] = Field(default_factory=list)
    comments: list[ForumComment] = Field(default_factory=list)

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes
