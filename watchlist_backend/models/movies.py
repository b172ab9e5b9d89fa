from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class MovieRecord:
    """
    Enriched movie record built from TMDb details + credits.

    Transient: produced per request and returned as-is; never persisted directly
    (the watchlist stores a denormalized copy of these fields).
    """

    id: int
    title: str
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str | None = None
    tagline: str = ""
    overview: str | None = None
    genres: tuple[str, ...] = field(default_factory=tuple)
    director: str = "Unknown"
    actors: tuple[str, ...] = field(default_factory=tuple)
    vote_average: float | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["genres"] = list(self.genres)
        payload["actors"] = list(self.actors)
        return payload
