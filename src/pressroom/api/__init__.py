"""HTTP API for Pressroom."""
