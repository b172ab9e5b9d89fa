"""
Movie Watchlist API - FastAPI application.

Provides endpoints for:
- Logging in/out through IBM Cloud App ID
- Searching the TMDb catalog and fetching enriched movie details
- Listing, adding and removing movies on the caller's watchlist
- Serving the built frontend (when present)
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from api.deps import ApiError, get_frontend_dist_dir, get_session_secret
from api.routers import auth, movies, watchlist
from watchlist_backend.utils.env import get_list_env

logger = logging.getLogger(__name__)


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins from environment.
    Set CORS_ALLOW_ORIGINS as comma-separated list of origins.
    Example: CORS_ALLOW_ORIGINS=https://watchlist.example.com,http://localhost:5173
    """
    return get_list_env("CORS_ALLOW_ORIGINS")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting up Movie Watchlist API...")
    yield
    logger.info("Shutting down Movie Watchlist API...")


app = FastAPI(
    title="Movie Watchlist API",
    description="Search TMDb and keep a personal movie watchlist",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
# If no origins configured, allows all origins but disables credentials
cors_origins = get_cors_origins()
allow_credentials = len(cors_origins) > 0

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins if cors_origins else ["*"],
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Signed cookie session holding the App ID identity
app.add_middleware(SessionMiddleware, secret_key=get_session_secret(), same_site="lax")


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Dependency failures (missing config, client construction) land here.
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include routers
app.include_router(auth.router)
app.include_router(movies.router)
app.include_router(watchlist.router)


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def mount_frontend(app: FastAPI, dist_dir: str | Path) -> bool:
    """
    Serve a built single-page frontend from `dist_dir`.

    Files are served when they exist; any other non-API GET falls back to
    `index.html` so client-side navigation works. Returns False if there is
    nothing to serve.
    """
    root = Path(dist_dir).resolve()
    index = root / "index.html"
    if not index.is_file():
        return False

    assets = root / "assets"
    if assets.is_dir():
        app.mount("/assets", StaticFiles(directory=assets), name="assets")

    @app.get("/{full_path:path}", include_in_schema=False)
    def frontend(full_path: str):
        if full_path.startswith("api/"):
            raise ApiError("Not found", status_code=404)
        candidate = (root / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        return FileResponse(index)

    return True


if not mount_frontend(app, get_frontend_dist_dir()):

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "movie-watchlist"}
