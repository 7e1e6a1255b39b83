"""Local SQLite database management for the key-value store."""

from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from wandergo.cli.cache.models import StorageBase
from wandergo.cli.config import get_config_dir


def get_storage_db_path() -> Path:
    """Get path to the local storage database.

    Returns:
        Path to ~/.config/wandergo/storage.db
    """
    return get_config_dir() / "storage.db"


def get_storage_engine() -> Engine:
    """Get SQLAlchemy engine for the storage database."""
    db_path = get_storage_db_path()
    return create_engine(f"sqlite:///{db_path}", echo=False)


def init_storage_db() -> None:
    """Initialize the storage database.

    Creates all tables if they don't exist.
    """
    engine = get_storage_engine()
    StorageBase.metadata.create_all(engine)


def get_storage_session() -> Session:
    """Get a database session for the key-value store."""
    engine = get_storage_engine()
    SessionLocal = sessionmaker(bind=engine)
    return SessionLocal()
