"""Agent categories a step can be tagged with."""

from pydantic import TypeAdapter

from orchestrator.storage.ports import StoragePort

CUSTOM_AGENT_TYPES_KEY = "custom_agent_types"

DEFAULT_AGENT_TYPES = (
    "Content",
    "Design",
    "Scheduler",
    "Heatmaps",
    "Bounce",
    "Subject Line Checker",
    "Scraper",
    "CRM",
    "Outreach",
    "Analytics",
)

_types_adapter = TypeAdapter(list[str])


class AgentTypeRegistry:
    """Built-in agent categories plus the ones a user added."""

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage

    def custom_types(self) -> list[str]:
        raw = self._storage.read(CUSTOM_AGENT_TYPES_KEY)
        return _types_adapter.validate_json(raw) if raw else []

    def list_types(self) -> list[str]:
        return [*DEFAULT_AGENT_TYPES, *self.custom_types()]

    def add_custom_type(self, name: str) -> bool:
        """Register a new category; False if it is blank or already known."""
        name = name.strip()
        if not name or name in self.list_types():
            return False
        updated = [*self.custom_types(), name]
        self._storage.write(CUSTOM_AGENT_TYPES_KEY, _types_adapter.dump_json(updated))
        return True
