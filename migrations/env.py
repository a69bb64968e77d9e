"""Alembic environment.

Each store has its own revision branch and its own database, chosen per run:
``alembic -x store=secondary upgrade secondary@head`` migrates the secondary
store, anything else migrates the primary.
"""

from alembic import context
from sqlalchemy import engine_from_config, pool

from contentstore.config import get_settings

config = context.config


def _url() -> str:
    settings = get_settings()
    store = context.get_x_argument(as_dictionary=True).get("store", "primary")
    url = settings.SECONDARY_DATABASE_URL if store == "secondary" else settings.PRIMARY_DATABASE_URL
    # psycopg 3 driver for SQLAlchemy
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg://" + url[len("postgresql://") :]
    return url


def run_migrations_offline() -> None:
    context.configure(url=_url(), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = _url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
