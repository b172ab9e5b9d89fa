from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from supabase import Client

from watchlist_backend.models.movies import MovieRecord

WATCHLIST_SCHEMA = "core"
WATCHLIST_TABLE = "watchlist_entries"


class WatchlistRepositoryError(RuntimeError):
    pass


class WatchlistEntryNotFound(WatchlistRepositoryError):
    pass


class WatchlistRevisionConflict(WatchlistRepositoryError):
    pass


def _now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_revision(generation: int = 1) -> str:
    return f"{int(generation)}-{uuid4().hex}"


def _table(db: Client):
    return db.schema(WATCHLIST_SCHEMA).table(WATCHLIST_TABLE)


def _execute(query: Any, context: str) -> Any:
    try:
        response = query.execute()
    except Exception as exc:
        raise WatchlistRepositoryError(f"Supabase error during {context}: {exc}") from exc
    if hasattr(response, "error") and response.error:
        raise WatchlistRepositoryError(f"Supabase error during {context}: {response.error}")
    return response


def _rows(response: Any) -> list[dict[str, Any]]:
    data = response.data or []
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


def row_to_document(row: dict[str, Any]) -> dict[str, Any]:
    """
    Map a `core.watchlist_entries` row to the document shape the frontend uses.

    `_id`/`_rev` are what the client echoes back on delete.
    """

    return {
        "_id": str(row.get("id")),
        "_rev": row.get("rev"),
        "userId": row.get("user_id"),
        "movieId": row.get("movie_id"),
        "title": row.get("title"),
        "poster_path": row.get("poster_path"),
        "release_date": row.get("release_date"),
        "overview": row.get("overview"),
        "tagline": row.get("tagline"),
        "genres": row.get("genres") or [],
        "director": row.get("director"),
        "actors": row.get("actors") or [],
        "vote_average": row.get("vote_average"),
        "addedAt": row.get("added_at"),
    }


def build_entry_row(owner_id: str, movie: MovieRecord, *, added_at: str | None = None) -> dict[str, Any]:
    return {
        "id": str(uuid4()),
        "rev": new_revision(),
        "user_id": owner_id,
        "movie_id": movie.id,
        "title": movie.title,
        "poster_path": movie.poster_path,
        "release_date": movie.release_date,
        "overview": movie.overview,
        "tagline": movie.tagline,
        "genres": list(movie.genres),
        "director": movie.director,
        "actors": list(movie.actors),
        "vote_average": movie.vote_average,
        "added_at": added_at or _now_utc_iso(),
    }


def list_entries(db: Client, owner_id: str) -> list[dict[str, Any]]:
    """Return every watchlist entry owned by `owner_id` (no ordering guarantee)."""
    response = _execute(_table(db).select("*").eq("user_id", owner_id), "listing watchlist entries")
    return [row_to_document(row) for row in _rows(response)]


def create_entry(db: Client, owner_id: str, movie: MovieRecord) -> str:
    """
    Store a denormalized copy of `movie` for `owner_id` and return the new entry id.

    Duplicate (owner, movie) pairs are allowed.
    """

    if not owner_id:
        raise WatchlistRepositoryError("Cannot create a watchlist entry without an owner.")

    row = build_entry_row(owner_id, movie)
    response = _execute(_table(db).insert(row), "inserting watchlist entry")
    data = _rows(response)
    if data and data[0].get("id"):
        return str(data[0]["id"])
    return row["id"]


def _is_uuid(value: str) -> bool:
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def delete_entry(db: Client, owner_id: str, doc_id: str, rev: str) -> None:
    """
    Delete an entry only when id, owner and revision all match.

    Raises WatchlistEntryNotFound if the owner has no entry with `doc_id`, and
    WatchlistRevisionConflict if it exists under a different revision.
    """

    if not _is_uuid(doc_id):
        raise WatchlistEntryNotFound(f"Watchlist entry {doc_id!r} not found.")

    response = _execute(
        _table(db).delete().eq("id", doc_id).eq("user_id", owner_id).eq("rev", rev),
        "deleting watchlist entry",
    )
    if _rows(response):
        return

    lookup = _execute(
        _table(db).select("id, rev").eq("id", doc_id).eq("user_id", owner_id).limit(1),
        "looking up watchlist entry",
    )
    existing = _rows(lookup)
    if not existing:
        raise WatchlistEntryNotFound(f"Watchlist entry {doc_id!r} not found.")
    raise WatchlistRevisionConflict(
        f"Watchlist entry {doc_id!r} is at revision {existing[0].get('rev')!r}, not {rev!r}."
    )
