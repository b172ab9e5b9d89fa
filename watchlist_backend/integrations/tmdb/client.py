from __future__ import annotations

import os
from typing import Any, Mapping

import requests

from watchlist_backend.utils.env import get_float_env

TMDB_API_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_LANGUAGE = "en-US"
DEFAULT_TIMEOUT_SECONDS = 10.0


class TmdbClientError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, body_snippet: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body_snippet = body_snippet


def _require_api_key(api_key: str | None) -> str:
    resolved = (api_key or os.getenv("TMDB_API_KEY") or "").strip()
    if not resolved:
        raise RuntimeError("TMDB_API_KEY is not set.")
    return resolved


def resolve_base_url(base_url: str | None = None) -> str:
    resolved = (base_url or os.getenv("TMDB_API_BASE_URL") or TMDB_API_BASE_URL).strip()
    return resolved.rstrip("/")


def resolve_timeout_seconds() -> float:
    return get_float_env("TMDB_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)


def _is_read_access_token(api_key: str) -> bool:
    # v4 read access tokens are JWTs; v3 keys are 32 hex chars.
    return api_key.count(".") == 2


def _auth_params(api_key: str) -> tuple[dict[str, str], dict[str, str]]:
    """Return (headers, params) carrying the credential the way TMDb expects for its type."""
    if _is_read_access_token(api_key):
        return {"authorization": f"Bearer {api_key}"}, {}
    return {}, {"api_key": api_key}


def _request_json(
    session: requests.Session,
    url: str,
    *,
    api_key: str,
    params: Mapping[str, Any] | None = None,
    timeout_seconds: float | None = None,
) -> dict[str, Any]:
    auth_headers, auth_params = _auth_params(api_key)
    headers = {"accept": "application/json", **auth_headers}
    query = {**dict(params or {}), **auth_params}
    timeout = timeout_seconds if timeout_seconds is not None else resolve_timeout_seconds()

    try:
        resp = session.get(url, params=query, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise TmdbClientError(f"TMDb request failed: {exc}") from exc

    if not 200 <= resp.status_code < 300:
        raise TmdbClientError(
            f"TMDb request failed with HTTP {resp.status_code}.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        )

    try:
        payload = resp.json()
    except ValueError as exc:
        raise TmdbClientError(
            "TMDb returned non-JSON response.",
            status_code=resp.status_code,
            body_snippet=(resp.text or "")[:400],
        ) from exc

    if not isinstance(payload, dict):
        raise TmdbClientError("TMDb returned unexpected JSON shape (not an object).")
    return payload


def search_movies(
    query: str,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    base_url: str | None = None,
    language: str = DEFAULT_LANGUAGE,
) -> list[dict[str, Any]]:
    """
    Search TMDb movies by free text via `/search/movie` (first page only).

    Returns the raw `results` summaries in TMDb's relevance order.
    """

    cleaned = (query or "").strip()
    if not cleaned:
        raise ValueError("Search query is empty.")

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{resolve_base_url(base_url)}/search/movie"
    payload = _request_json(
        session,
        url,
        api_key=api_key,
        params={"query": cleaned, "include_adult": "false", "language": language, "page": 1},
    )
    results = payload.get("results")
    if not isinstance(results, list):
        raise TmdbClientError("TMDb search response missing results.")
    return [r for r in results if isinstance(r, dict)]


def fetch_movie_details(
    movie_id: int,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    base_url: str | None = None,
    language: str = DEFAULT_LANGUAGE,
) -> dict[str, Any]:
    """Fetch the full JSON object returned by `/3/movie/{id}`."""

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{resolve_base_url(base_url)}/movie/{int(movie_id)}"
    return _request_json(session, url, api_key=api_key, params={"language": language})


def fetch_movie_credits(
    movie_id: int,
    *,
    api_key: str | None = None,
    session: requests.Session | None = None,
    base_url: str | None = None,
    language: str = DEFAULT_LANGUAGE,
) -> dict[str, Any]:
    """
    Fetch `/3/movie/{id}/credits`.

    `cast` is ordered by billing as TMDb lists it; `crew` carries `job` per person.
    """

    api_key = _require_api_key(api_key)
    session = session or requests.Session()
    url = f"{resolve_base_url(base_url)}/movie/{int(movie_id)}/credits"
    return _request_json(session, url, api_key=api_key, params={"language": language})
