"""Pressroom: social publishing backend with moderated communities."""

__version__ = "0.1.0"
