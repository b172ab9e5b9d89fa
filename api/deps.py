"""
Dependency injection for Supabase, TMDb, App ID and other shared resources.
"""
from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Annotated

import requests
from fastapi import Depends
from supabase import Client, create_client

from watchlist_backend.integrations.appid import AppIdConfig
from watchlist_backend.utils.env import load_env

load_env()

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECRET = "secret_key"


@lru_cache
def get_session_secret() -> str:
    secret = (os.getenv("SESSION_SECRET") or "").strip()
    if not secret:
        logger.warning("SESSION_SECRET is not set; falling back to an insecure default")
        return DEFAULT_SESSION_SECRET
    return secret


@lru_cache
def get_frontend_dist_dir() -> str:
    return (os.getenv("FRONTEND_DIST_DIR") or "client/dist").strip()


@lru_cache
def get_supabase_url() -> str:
    url = (os.getenv("SUPABASE_URL") or "").strip()
    if not url:
        raise RuntimeError("SUPABASE_URL environment variable is not set")
    return url


@lru_cache
def get_supabase_service_key() -> str:
    key = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip()
    if not key:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY environment variable is not set")
    return key


def get_supabase_client() -> Client:
    """
    Returns a Supabase client using the service role key (bypasses RLS).

    Identity comes from App ID rather than Supabase Auth, so the watchlist
    repository scopes every query to the caller's subject id itself.
    """
    return create_client(get_supabase_url(), get_supabase_service_key())


@lru_cache
def get_tmdb_session() -> requests.Session:
    """Process-wide HTTP session for TMDb (connection pooling)."""
    return requests.Session()


@lru_cache
def get_appid_config() -> AppIdConfig:
    return AppIdConfig.from_env()


# Type aliases for dependency injection
SupabaseClient = Annotated[Client, Depends(get_supabase_client)]
TmdbSession = Annotated[requests.Session, Depends(get_tmdb_session)]
AppIdSettings = Annotated[AppIdConfig, Depends(get_appid_config)]


class ApiError(Exception):
    """Error rendered to clients as `{"error": message}` with the given status."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
