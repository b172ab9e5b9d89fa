"""
Repository layer for DB access patterns.
"""

from watchlist_backend.repositories.watchlist import (
    WatchlistEntryNotFound,
    WatchlistRepositoryError,
    WatchlistRevisionConflict,
    create_entry,
    delete_entry,
    list_entries,
)

__all__ = [
    "WatchlistEntryNotFound",
    "WatchlistRepositoryError",
    "WatchlistRevisionConflict",
    "create_entry",
    "delete_entry",
    "list_entries",
]
