"""Local storage and cache for offline CLI operation."""

from wandergo.cli.cache.database import (
    get_storage_db_path,
    get_storage_engine,
    get_storage_session,
    init_storage_db,
)
from wandergo.cli.cache.manager import (
    DEFAULT_TTL,
    OFFLINE_TTL,
    CacheKind,
    CacheManager,
    CacheSize,
)
from wandergo.cli.cache.models import StorageBase, StoredItem
from wandergo.cli.cache.repositories import KeyValueRepository
from wandergo.cli.cache.storage import KeyValueStore

__all__ = [
    "DEFAULT_TTL",
    "OFFLINE_TTL",
    "CacheKind",
    "CacheManager",
    "CacheSize",
    "KeyValueRepository",
    "KeyValueStore",
    "StorageBase",
    "StoredItem",
    "get_storage_db_path",
    "get_storage_engine",
    "get_storage_session",
    "init_storage_db",
]
