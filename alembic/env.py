"""
Alembic environment for the college portal schema.

Target database, first hit wins:
  -x db_url=...              one-off override on the command line
  sqlalchemy.url             when set in alembic.ini
  ALEMBIC_DATABASE_URL, then the application's own lookup (db/config.py)
"""

from __future__ import annotations

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

import db.models  # noqa: F401  (imports register every table on Base.metadata)
from db.base import Base
from db.config import is_supported_url, normalize_database_url, resolve_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _migration_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("db_url", "").strip()
    ini_url = (config.get_main_option("sqlalchemy.url") or "").strip()
    if override:
        url = normalize_database_url(override)
    elif ini_url:
        url = normalize_database_url(ini_url)
    else:
        url = resolve_database_url(preferred=("ALEMBIC_DATABASE_URL",))

    if not is_supported_url(url):
        raise RuntimeError(f"Unsupported migration target: {url.split(':', 1)[0]}")
    return url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(url=_migration_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = _migration_url()
    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
