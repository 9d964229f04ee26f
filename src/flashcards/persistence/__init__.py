"""Durable session-position storage."""

from .adapter import STORAGE_KEY, PersistedRecord, PersistenceAdapter
from .stores import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

__all__ = [
    "STORAGE_KEY",
    "PersistedRecord",
    "PersistenceAdapter",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
]
