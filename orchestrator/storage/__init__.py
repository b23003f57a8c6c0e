"""Storage ports for template and history persistence."""

from orchestrator.storage.ports import FileStorage, InMemoryStorage, StoragePort
from orchestrator.storage.sqlite import SqliteStorage

__all__ = [
    "FileStorage",
    "InMemoryStorage",
    "SqliteStorage",
    "StoragePort",
]
