"""Service locator for the process-wide partial store."""

from typing import Optional

from server import config
from store.backends import FilesystemBackend, SQLiteBackend
from store.partial_store import PartialStore

_partial_store: Optional[PartialStore] = None


def build_partial_store() -> PartialStore:
    """
    Build a PartialStore from server configuration.

    Returns:
        Store with an SQLite primary (unless disabled) and a filesystem fallback
    """
    primary = SQLiteBackend(config.PRIMARY_DB_PATH) if config.PRIMARY_ENABLED else None
    fallback = FilesystemBackend(config.FALLBACK_DIR)
    return PartialStore(primary=primary, fallback=fallback)


def set_partial_store(store: Optional[PartialStore]) -> None:
    """Set global partial store instance"""
    global _partial_store
    _partial_store = store


def get_partial_store() -> PartialStore:
    """Get global partial store instance, building it from config on first use"""
    global _partial_store
    if _partial_store is None:
        _partial_store = build_partial_store()
    return _partial_store
