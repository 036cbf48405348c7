"""
db/config.py

Where the portal finds its database.

The URL comes from the environment, optionally seeded from ``.env`` files in
the project root. Lookup order, first hit wins:

  DATABASE_URL
  CLOUD_DATABASE_URL   (only when ENVIRONMENT is prod/production/staging/cloud)
  LOCAL_DATABASE_URL

Callers with their own override (Alembic's ``ALEMBIC_DATABASE_URL``) pass it
in front of that list via ``preferred``.
"""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from pathlib import Path

ENV_FILES: tuple[str, ...] = (".env", ".env.local")

DEPLOYED_ENVIRONMENTS = frozenset({"prod", "production", "staging", "cloud"})

SUPPORTED_SCHEMES: tuple[str, ...] = ("postgresql", "sqlite")


def load_env_files(root: Path | None = None) -> None:
    """
    Copy ``KEY=VALUE`` pairs from the project's env files into ``os.environ``.

    Variables already set in the process win over file values.
    """

    base = root or Path(__file__).resolve().parents[1]
    for filename in ENV_FILES:
        env_path = base / filename
        if not env_path.is_file():
            continue
        for key, value in _iter_env_pairs(env_path.read_text(encoding="utf-8")):
            os.environ.setdefault(key, value)


def _iter_env_pairs(text: str) -> Iterator[tuple[str, str]]:
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if key:
            yield key, value.strip().strip("'\"")


def normalize_database_url(url: str) -> str:
    """
    Point bare ``postgres://`` / ``postgresql://`` URLs at the psycopg 3 driver.
    """

    url = url.strip()
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


def _candidate_env_names() -> list[str]:
    names = ["DATABASE_URL"]
    if os.getenv("ENVIRONMENT", "local").strip().lower() in DEPLOYED_ENVIRONMENTS:
        names.append("CLOUD_DATABASE_URL")
    names.append("LOCAL_DATABASE_URL")
    return names


def resolve_database_url(preferred: Sequence[str] = ()) -> str:
    """
    Return the first configured database URL, normalised for SQLAlchemy.

    ``preferred`` names env variables consulted before the standard ones.
    """

    load_env_files()
    for name in [*preferred, *_candidate_env_names()]:
        value = (os.getenv(name) or "").strip()
        if value:
            return normalize_database_url(value)

    raise RuntimeError(
        "No database URL configured for the portal. Set DATABASE_URL, or "
        "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
    )


def is_supported_url(url: str) -> bool:
    return url.startswith(SUPPORTED_SCHEMES)
