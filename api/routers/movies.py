"""
Catalog endpoints: movie search and enriched movie details.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Query

from api.deps import ApiError, TmdbSession
from watchlist_backend.integrations.tmdb.client import search_movies
from watchlist_backend.services.movie_details import get_rich_movie

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["movies"])


@router.get("/search")
def search(session: TmdbSession, q: str | None = Query(default=None)) -> list[dict[str, Any]]:
    """Search the catalog; returns TMDb's basic movie summaries."""
    if not q or not q.strip():
        raise ApiError("Query required", status_code=400)

    logger.info(f"Searching for: {q}")
    try:
        results = search_movies(q, session=session)
    except RuntimeError as exc:  # TmdbClientError, or TMDB_API_KEY missing
        logger.error(f"Search Error: {exc}")
        raise ApiError("Failed to fetch movies", status_code=500) from exc

    logger.info(f"Found {len(results)} movies.")
    return results


@router.get("/movie/{movie_id}")
def get_movie(movie_id: str, session: TmdbSession) -> dict[str, Any]:
    """Details + credits joined into one record (director, top cast, genres)."""
    # Ids that are not TMDb ids fail like any other lookup failure.
    if not movie_id.isdecimal() or int(movie_id) < 1:
        logger.error(f"Details Fetch Error: invalid movie id {movie_id!r}")
        raise ApiError("Failed to get movie details", status_code=500)
    try:
        movie = get_rich_movie(int(movie_id), session=session)
    except RuntimeError as exc:  # MovieAggregationError, or TMDB_API_KEY missing
        logger.error(f"Details Fetch Error: {exc}")
        raise ApiError("Failed to get movie details", status_code=500) from exc
    return movie.to_dict()
