from .memory import InMemoryStore
from .postgres import PostgresStore
from .store import DuplicateKeyError, ImportStore, StoreError

__all__ = [
    "DuplicateKeyError",
    "ImportStore",
    "InMemoryStore",
    "PostgresStore",
    "StoreError",
]
