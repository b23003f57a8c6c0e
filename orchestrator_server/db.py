"""Storage wiring shared by the route modules.

Each getter is a FastAPI dependency so tests can swap the backend with
``app.dependency_overrides``.
"""

from fastapi import Depends

from orchestrator.generation.learning import PreferenceStore
from orchestrator.library.agent_types import AgentTypeRegistry
from orchestrator.library.history import HistoryStore
from orchestrator.storage.ports import StoragePort
from orchestrator.storage.sqlite import SqliteStorage
from orchestrator.templates.store import TemplateStore
from orchestrator_server.config import DB_PATH

_storage: SqliteStorage | None = None


def init_all() -> None:
    """create the sqlite key/value table."""
    get_storage()


def get_storage() -> StoragePort:
    global _storage
    if _storage is None:
        _storage = SqliteStorage(DB_PATH)
    return _storage


def get_template_store(storage: StoragePort = Depends(get_storage)) -> TemplateStore:
    return TemplateStore(storage)


def get_history_store(storage: StoragePort = Depends(get_storage)) -> HistoryStore:
    return HistoryStore(storage)


def get_preference_store(storage: StoragePort = Depends(get_storage)) -> PreferenceStore:
    return PreferenceStore(storage)


def get_agent_types(storage: StoragePort = Depends(get_storage)) -> AgentTypeRegistry:
    return AgentTypeRegistry(storage)
