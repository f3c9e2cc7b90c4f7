# src/pressroom/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    comments_router,
    communities_router,
    complaints_router,
    moderation_router,
    notifications_router,
    posts_router,
    tags_router,
    users_router,
)

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
