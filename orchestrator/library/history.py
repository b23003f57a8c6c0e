"""Prompt and generated-workflow history."""

from pydantic import TypeAdapter

from orchestrator.models.history import WorkflowHistoryEntry
from orchestrator.models.workflow import Workflow
from orchestrator.storage.ports import StoragePort
from orchestrator.utils.identifiers import generate_record_id, utc_timestamp

PROMPT_HISTORY_KEY = "prompt_history"
WORKFLOW_HISTORY_KEY = "workflow_history"
MAX_PROMPTS = 50
MAX_WORKFLOWS = 100

_prompts_adapter = TypeAdapter(list[str])
_workflows_adapter = TypeAdapter(list[WorkflowHistoryEntry])


class HistoryStore:
    """Most-recent-first history of prompts and the workflows they produced."""

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage

    def get_prompt_history(self) -> list[str]:
        raw = self._storage.read(PROMPT_HISTORY_KEY)
        return _prompts_adapter.validate_json(raw) if raw else []

    def save_prompt(self, prompt: str) -> None:
        """Move *prompt* to the front, dropping an older copy of it."""
        history = [p for p in self.get_prompt_history() if p != prompt]
        updated = [prompt, *history][:MAX_PROMPTS]
        self._storage.write(PROMPT_HISTORY_KEY, _prompts_adapter.dump_json(updated))

    def get_workflow_history(self) -> list[WorkflowHistoryEntry]:
        raw = self._storage.read(WORKFLOW_HISTORY_KEY)
        return _workflows_adapter.validate_json(raw) if raw else []

    def save_workflow(self, prompt: str, workflow: Workflow) -> WorkflowHistoryEntry:
        entry = WorkflowHistoryEntry(
            id=generate_record_id("wf"),
            prompt=prompt,
            workflow=workflow.model_copy(deep=True),
            saved_at=utc_timestamp(),
        )
        updated = [entry, *self.get_workflow_history()][:MAX_WORKFLOWS]
        self._storage.write(WORKFLOW_HISTORY_KEY, _workflows_adapter.dump_json(updated))
        return entry
