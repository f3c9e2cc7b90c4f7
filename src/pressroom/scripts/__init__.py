"""Operational scripts for Pressroom."""
