"""
Shared watchlist backend library code.

This package holds the catalog gateway, the movie-details aggregation and the
watchlist store adapter used by the FastAPI app in `api/`.

App entrypoints (FastAPI routers) should live outside this package and import
from `watchlist_backend` rather than the other way around.
"""
