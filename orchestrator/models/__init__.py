"""Core data models for orchestrator."""

from orchestrator.models.history import LearnedPreference, WorkflowHistoryEntry
from orchestrator.models.step import (
    AutoTiming,
    ExecutionStatus,
    InputConfig,
    ManualTiming,
    PriorOutputInput,
    PromptInput,
    RecurringPeriod,
    RecurringTiming,
    ScriptInput,
    Step,
    TimingLogic,
    TriggerTiming,
)
from orchestrator.models.template import Template, TemplateVersion
from orchestrator.models.workflow import Workflow, WorkflowMetadata

__all__ = [
    # Steps
    "AutoTiming",
    "ExecutionStatus",
    "InputConfig",
    "ManualTiming",
    "PriorOutputInput",
    "PromptInput",
    "RecurringPeriod",
    "RecurringTiming",
    "ScriptInput",
    "Step",
    "TimingLogic",
    "TriggerTiming",
    # Graph
    "Workflow",
    "WorkflowMetadata",
    # Templates
    "Template",
    "TemplateVersion",
    # History
    "LearnedPreference",
    "WorkflowHistoryEntry",
]
