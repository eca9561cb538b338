"""
Shared environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

# Checked in order; the first non-empty value is the sync store URL.
DATABASE_URL_VARIABLES: tuple[str, ...] = (
    "DATABASE_URL",
    "CLOUD_DATABASE_URL",
    "LOCAL_DATABASE_URL",
)


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's recommended psycopg driver form.
    """

    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def configured_database_url() -> str | None:
    for name in DATABASE_URL_VARIABLES:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return None


def resolve_database_url() -> str:
    """
    First of DATABASE_URL, CLOUD_DATABASE_URL, LOCAL_DATABASE_URL that is set,
    in psycopg driver form.
    """

    load_env_files()

    url = configured_database_url()
    if url is None:
        raise RuntimeError(
            "No database URL configured. Set one of " + ", ".join(DATABASE_URL_VARIABLES) + "."
        )
    return normalize_postgres_url(url)
