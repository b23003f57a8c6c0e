"""Records kept across sessions: generated workflows and learned preferences."""

from pydantic import BaseModel, Field

from orchestrator.models.workflow import Workflow


class WorkflowHistoryEntry(BaseModel):
    """a workflow as it came back from generation, with its prompt."""

    id: str
    prompt: str
    workflow: Workflow
    saved_at: str


class LearnedPreference(BaseModel):
    """Counts of what a user changed after generation.

    Each mapping counts occurrences per agent type, timing kind or
    input kind observed in the edited workflow.
    """

    id: str
    original_prompt: str
    agent_type_changes: dict[str, int] = Field(default_factory=dict)
    timing_preferences: dict[str, int] = Field(default_factory=dict)
    input_type_preferences: dict[str, int] = Field(default_factory=dict)
    saved_at: str
