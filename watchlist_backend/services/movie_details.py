"""
Movie details aggregation.

Joins the TMDb details and credits payloads for one movie into a `MovieRecord`.
Both lookups run concurrently; if either fails the whole lookup fails and no
partial record is returned.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping

import requests

from watchlist_backend.integrations.tmdb.client import fetch_movie_credits, fetch_movie_details
from watchlist_backend.models.movies import MovieRecord

logger = logging.getLogger(__name__)

UNKNOWN_DIRECTOR = "Unknown"
TOP_CAST_LIMIT = 5


class MovieAggregationError(RuntimeError):
    def __init__(self, message: str, *, movie_id: int | None = None) -> None:
        super().__init__(message)
        self.movie_id = movie_id


def _dict_items(value: Any) -> list[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def find_director(crew: Any) -> str:
    # First credited Director wins (co-directors keep TMDb's listing order).
    for person in _dict_items(crew):
        if person.get("job") == "Director":
            name = person.get("name")
            return name if isinstance(name, str) else ""
    return UNKNOWN_DIRECTOR


def top_cast_names(cast: Any, *, limit: int = TOP_CAST_LIMIT) -> list[str]:
    names: list[str] = []
    for actor in _dict_items(cast)[:limit]:
        name = actor.get("name")
        if isinstance(name, str) and name:
            names.append(name)
    return names


def genre_names(genres: Any) -> list[str]:
    return [g["name"] for g in _dict_items(genres) if isinstance(g.get("name"), str)]


def build_movie_record(details: Mapping[str, Any], credits: Mapping[str, Any]) -> MovieRecord:
    """Join a details payload and a credits payload into a single record."""
    movie_id = details.get("id")
    if not isinstance(movie_id, int):
        raise MovieAggregationError("TMDb details payload is missing an id.")

    tagline = details.get("tagline")
    vote_average = details.get("vote_average")
    return MovieRecord(
        id=movie_id,
        title=str(details.get("title") or ""),
        poster_path=details.get("poster_path"),
        backdrop_path=details.get("backdrop_path"),
        release_date=details.get("release_date"),
        tagline=tagline.upper() if isinstance(tagline, str) and tagline else "",
        overview=details.get("overview"),
        genres=tuple(genre_names(details.get("genres"))),
        director=find_director(credits.get("crew")),
        actors=tuple(top_cast_names(credits.get("cast"))),
        vote_average=float(vote_average) if isinstance(vote_average, (int, float)) else None,
    )


def get_rich_movie(
    movie_id: int,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
) -> MovieRecord:
    """
    Fetch details and credits for `movie_id` in parallel and join them.

    Raises MovieAggregationError if either lookup fails.
    """

    movie_id = int(movie_id)
    session = session or requests.Session()

    with ThreadPoolExecutor(max_workers=2) as pool:
        details_future = pool.submit(fetch_movie_details, movie_id, api_key=api_key, session=session)
        credits_future = pool.submit(fetch_movie_credits, movie_id, api_key=api_key, session=session)
        try:
            details = details_future.result()
            credits = credits_future.result()
        except RuntimeError as exc:  # TmdbClientError, or TMDB_API_KEY missing
            logger.error(f"TMDb lookup failed for movie {movie_id}: {exc}")
            raise MovieAggregationError(f"Failed to load movie {movie_id}: {exc}", movie_id=movie_id) from exc

    return build_movie_record(details, credits)
