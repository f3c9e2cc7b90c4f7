"""API endpoint modules for version 1."""

from .communities import router as communities_router
from .complaints import router as complaints_router
from .moderation import router as moderation_router
from .notifications import router as notifications_router
from .posts import comments_router
from .posts import router as posts_router
from .tags import router as tags_router
from .users import router as users_router

__all__ = [
    "posts_router",
    "comments_router",
    "communities_router",
    "complaints_router",
    "moderation_router",
    "notifications_router",
    "tags_router",
    "users_router",
]
