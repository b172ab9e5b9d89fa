"""
Domain models shared across services and the API.
"""

from watchlist_backend.models.movies import MovieRecord

__all__ = [
    "MovieRecord",
]
