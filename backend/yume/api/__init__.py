"""API module."""

from yume.api.auth import router as auth_router
from yume.api.forum import router as forum_router
from yume.api.media import router as media_router
from yume.api.site_settings import router as settings_router
from yume.api.users import router as users_router

routers = [auth_router, users_router, media_router, forum_router, settings_router]

__all__ = [
    "auth_router",
    "users_router",
    "media_router",
    "forum_router",
    "settings_router",
    "routers",
]
