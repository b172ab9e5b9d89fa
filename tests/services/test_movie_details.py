from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from watchlist_backend.integrations.tmdb.client import TmdbClientError
from watchlist_backend.services import movie_details as mod
from watchlist_backend.services.movie_details import (
    MovieAggregationError,
    build_movie_record,
    find_director,
    get_rich_movie,
    top_cast_names,
)

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures" / "tmdb"


@pytest.fixture
def details() -> dict:
    return json.loads((FIXTURES / "movie_details_inception.json").read_text(encoding="utf-8"))


@pytest.fixture
def credits() -> dict:
    return json.loads((FIXTURES / "movie_credits_inception.json").read_text(encoding="utf-8"))


def test_build_movie_record_joins_details_and_credits(details: dict, credits: dict) -> None:
    movie = build_movie_record(details, credits)

    assert movie.id == 27205
    assert movie.title == "Inception"
    assert movie.director == "Christopher Nolan"
    assert movie.actors == (
        "Leonardo DiCaprio",
        "Joseph Gordon-Levitt",
        "Ken Watanabe",
        "Tom Hardy",
        "Elliot Page",
    )
    assert movie.genres == ("Action", "Science Fiction", "Adventure")
    assert movie.tagline == "YOUR MIND IS THE SCENE OF THE CRIME."
    assert movie.vote_average == 8.369
    assert movie.backdrop_path == "/8ZTVqvKDQ8emSGUEMjsS4yHAwrp.jpg"

    payload = movie.to_dict()
    assert payload["actors"][0] == "Leonardo DiCaprio"
    assert isinstance(payload["genres"], list)


def test_missing_tagline_becomes_empty_string(details: dict, credits: dict) -> None:
    details["tagline"] = ""
    assert build_movie_record(details, credits).tagline == ""
    details.pop("tagline")
    assert build_movie_record(details, credits).tagline == ""


def test_director_unknown_when_no_director_credit() -> None:
    crew = [{"name": "Hans Zimmer", "job": "Original Music Composer"}, {"name": "Someone", "job": "Writer"}]
    assert find_director(crew) == "Unknown"
    assert find_director([]) == "Unknown"
    assert find_director(None) == "Unknown"


def test_first_director_wins() -> None:
    crew = [
        {"name": "Lana Wachowski", "job": "Director"},
        {"name": "Lilly Wachowski", "job": "Director"},
    ]
    assert find_director(crew) == "Lana Wachowski"


def test_director_credit_with_blank_name_is_not_unknown() -> None:
    crew = [{"name": "", "job": "Director"}, {"name": "Second Director", "job": "Director"}]
    assert find_director(crew) == ""


def test_top_cast_keeps_order_and_truncates() -> None:
    cast = [{"name": f"Actor {i}"} for i in range(8)]
    assert top_cast_names(cast) == ["Actor 0", "Actor 1", "Actor 2", "Actor 3", "Actor 4"]
    assert top_cast_names(cast[:2]) == ["Actor 0", "Actor 1"]
    assert top_cast_names([]) == []


def test_build_movie_record_requires_id(credits: dict) -> None:
    with pytest.raises(MovieAggregationError):
        build_movie_record({"title": "No id"}, credits)


def test_get_rich_movie_fetches_both_payloads(monkeypatch: pytest.MonkeyPatch, details: dict, credits: dict) -> None:
    calls: list[tuple[str, int]] = []

    def fake_details(movie_id, **kwargs):  # noqa: ANN001, ANN003
        calls.append(("details", movie_id))
        return details

    def fake_credits(movie_id, **kwargs):  # noqa: ANN001, ANN003
        calls.append(("credits", movie_id))
        return credits

    monkeypatch.setattr(mod, "fetch_movie_details", fake_details)
    monkeypatch.setattr(mod, "fetch_movie_credits", fake_credits)

    movie = get_rich_movie(27205, api_key="key")

    assert sorted(calls) == [("credits", 27205), ("details", 27205)]
    assert movie.title == "Inception"
    assert movie.director == "Christopher Nolan"
    assert len(movie.actors) <= 5


@pytest.mark.parametrize("failing", ["details", "credits"])
def test_get_rich_movie_fails_whole_when_either_call_fails(
    monkeypatch: pytest.MonkeyPatch, details: dict, credits: dict, failing: str
) -> None:
    def fake_details(movie_id, **kwargs):  # noqa: ANN001, ANN003
        if failing == "details":
            raise TmdbClientError("TMDb request failed with HTTP 500.", status_code=500)
        return details

    def fake_credits(movie_id, **kwargs):  # noqa: ANN001, ANN003
        if failing == "credits":
            raise TmdbClientError("TMDb request failed with HTTP 404.", status_code=404)
        return credits

    monkeypatch.setattr(mod, "fetch_movie_details", fake_details)
    monkeypatch.setattr(mod, "fetch_movie_credits", fake_credits)

    with pytest.raises(MovieAggregationError) as excinfo:
        get_rich_movie(27205, api_key="key")

    assert excinfo.value.movie_id == 27205
    assert isinstance(excinfo.value.__cause__, TmdbClientError)


def test_get_rich_movie_without_api_key_raises_aggregation_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TMDB_API_KEY", raising=False)
    session = MagicMock()

    with pytest.raises(MovieAggregationError) as excinfo:
        get_rich_movie(27205, session=session)

    assert excinfo.value.movie_id == 27205
    assert "TMDB_API_KEY" in str(excinfo.value)
    session.get.assert_not_called()
