"""
Watchlist endpoints.

All watchlist endpoints require a logged-in user; every query is scoped to
the caller's App ID subject id. Entries are create-or-delete only.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.auth import CurrentUser, SavingUser
from api.deps import ApiError, SupabaseClient
from watchlist_backend.models.movies import MovieRecord
from watchlist_backend.repositories.watchlist import (
    WatchlistEntryNotFound,
    WatchlistRepositoryError,
    WatchlistRevisionConflict,
    create_entry,
    delete_entry,
    list_entries,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/watchlist", tags=["watchlist"])


# --- Pydantic models ---


class MovieIn(BaseModel):
    """Movie record posted by the client (normally the `/api/movie/{id}` payload)."""

    id: int = Field(ge=1)
    title: str = Field(min_length=1, max_length=500)
    poster_path: str | None = None
    release_date: str | None = None
    overview: str | None = None
    tagline: str | None = None
    genres: list[str] = []
    director: str | None = None
    actors: list[str] = Field(default=[], max_length=5)
    vote_average: float | None = None

    def to_record(self) -> MovieRecord:
        return MovieRecord(
            id=self.id,
            title=self.title,
            poster_path=self.poster_path,
            release_date=self.release_date,
            overview=self.overview,
            tagline=self.tagline or "",
            genres=tuple(self.genres),
            director=self.director or "Unknown",
            actors=tuple(self.actors),
            vote_average=self.vote_average,
        )


class WatchlistEntry(BaseModel):
    id: str = Field(alias="_id")
    rev: str = Field(alias="_rev")
    userId: str
    movieId: int
    title: str
    poster_path: str | None = None
    release_date: str | None = None
    overview: str | None = None
    tagline: str | None = None
    genres: list[str] = []
    director: str | None = None
    actors: list[str] = []
    vote_average: float | None = None
    addedAt: str | None = None


class SaveResult(BaseModel):
    success: bool
    id: str


class DeleteResult(BaseModel):
    success: bool


# --- Endpoints ---


@router.get("", response_model=list[WatchlistEntry], response_model_by_alias=True)
def get_watchlist(user: CurrentUser, db: SupabaseClient) -> list[dict[str, Any]]:
    """List the caller's watchlist entries."""
    try:
        return list_entries(db, user.subject_id)
    except WatchlistRepositoryError as exc:
        logger.error(f"Fetch List Error: {exc}")
        raise ApiError("Failed to fetch watchlist", status_code=500) from exc


@router.post("", response_model=SaveResult)
def add_to_watchlist(user: SavingUser, movie: MovieIn, db: SupabaseClient) -> dict[str, Any]:
    """Save a movie to the caller's watchlist. Duplicates are not rejected."""
    try:
        entry_id = create_entry(db, user.subject_id, movie.to_record())
    except WatchlistRepositoryError as exc:
        logger.error(f"Watchlist Write Error: {exc}")
        raise ApiError("Failed to save movie", status_code=500) from exc

    logger.info(f"Saved movie with details: {movie.title}")
    return {"success": True, "id": entry_id}


@router.delete("/{doc_id}/{rev_id}", response_model=DeleteResult)
def remove_from_watchlist(user: CurrentUser, doc_id: str, rev_id: str, db: SupabaseClient) -> dict[str, Any]:
    """
    Delete one of the caller's entries.

    The revision must match the stored one; a stale revision yields 409.
    """
    try:
        delete_entry(db, user.subject_id, doc_id, rev_id)
    except WatchlistEntryNotFound as exc:
        logger.warning(f"Delete Error: {exc}")
        raise ApiError("Watchlist entry not found", status_code=404) from exc
    except WatchlistRevisionConflict as exc:
        logger.warning(f"Delete Error: {exc}")
        raise ApiError("Revision conflict", status_code=409) from exc
    except WatchlistRepositoryError as exc:
        logger.error(f"Delete Error: {exc}")
        raise ApiError("Failed to delete", status_code=500) from exc
    return {"success": True}
