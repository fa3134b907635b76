"""Document models for Yume TV."""

from yume.models.document import AppDocument
from yume.models.forum import ForumComment, ForumPost, PostCategory
from yume.models.media import Episode, Media, MediaComment, MediaType, Rating, Season
from yume.models.site_settings import MaintenanceMode, PlayerSettings, SiteSettings
from yume.models.user import PendingUser, Role, User, WatchedItem

__all__ = [
    "AppDocument",
    "User",
    "PendingUser",
    "WatchedItem",
    "Role",
    "Media",
    "MediaType",
    "MediaComment",
    "Season",
    "Episode",
    "Rating",
    "ForumPost",
    "ForumComment",
    "PostCategory",
    "SiteSettings",
    "MaintenanceMode",
    "PlayerSettings",
]
