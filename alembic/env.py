"""
Alembic environment for the catalog and booking schema.

The URL comes from app.settings and online runs go through the app's own
build_engine, so SQLite (local dev) and PostgreSQL (deployed) are migrated
with the same connection options the API uses. On SQLite, constraint
changes are emitted in batch mode because it cannot ALTER them in place.
"""

from logging.config import fileConfig

from alembic import context

# Load app models so Alembic can detect changes via autogenerate
import app.models  # noqa: F401
from app.database import build_engine
from app.models.base import Base
from app.settings import settings

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL for the configured dialect without connecting."""
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=settings.is_sqlite,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = build_engine(settings.database_url)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
                render_as_batch=settings.is_sqlite,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
