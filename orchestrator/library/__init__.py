"""Agent categories and editing history."""

from orchestrator.library.agent_types import DEFAULT_AGENT_TYPES, AgentTypeRegistry
from orchestrator.library.history import HistoryStore

__all__ = [
    "DEFAULT_AGENT_TYPES",
    "AgentTypeRegistry",
    "HistoryStore",
]
