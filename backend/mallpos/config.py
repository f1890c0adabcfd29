# backend/mallpos/config.py
from __future__ import annotations
import os

from dotenv import load_dotenv

# .env next to the backend (or in the working directory) is optional
load_dotenv()


def _env_string(name: str, default: str | None = None) -> str | None:
    """Return trimmed string-valued env vars, normalizing empty strings to the default."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    clean = raw.strip()
    return clean if clean else default


def _env_int(name: str, default: int) -> int:
    raw = _env_string(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def engine_options_for(uri: str, timeout_seconds: int) -> dict:
    """
    Engine options with a bounded wait on the datastore.

    SQLite waits on its file lock ("timeout"); network drivers get a
    connect timeout instead.
    """
    if uri.startswith("sqlite"):
        return {"connect_args": {"timeout": timeout_seconds}}
    return {
        "pool_pre_ping": True,
        "connect_args": {"connect_timeout": timeout_seconds},
    }


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = _env_string("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/mallpos.sqlite3
    SQLALCHEMY_DATABASE_URI = _env_string(
        "DATABASE_URL",  # hosted Postgres or any SQLAlchemy URL
        "sqlite:///mallpos.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    DB_TIMEOUT_SECONDS = _env_int("DB_TIMEOUT_SECONDS", 10)
    SQLALCHEMY_ENGINE_OPTIONS = engine_options_for(SQLALCHEMY_DATABASE_URI, DB_TIMEOUT_SECONDS)

    # Extra CORS origin for the hosted frontend (local Vite origins are always allowed)
    FRONTEND_URL = _env_string("FRONTEND_URL")

    LOG_LEVEL = (_env_string("LOG_LEVEL", "INFO") or "INFO").upper()

    LOW_STOCK_THRESHOLD = _env_int("LOW_STOCK_THRESHOLD", 5)
