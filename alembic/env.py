import sys
from pathlib import Path
import os

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from logging.config import fileConfig
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool
from alembic import context
from app.models import Base

load_dotenv()

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

db_url = os.environ.get("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL not set. Export it (or add in .env).")

# The app talks asyncpg; migrations run on the sync driver for the same database
sync_db_url = db_url.replace("+asyncpg", "").replace("+aiosqlite", "")
if sync_db_url.startswith("postgres://"):
    sync_db_url = "postgresql://" + sync_db_url[len("postgres://"):]


def run_migrations_offline():
    """Emit the migration SQL without connecting to a database."""
    context.configure(
        url=sync_db_url,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    engine = create_engine(sync_db_url, poolclass=NullPool)

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=Base.metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
