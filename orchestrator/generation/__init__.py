"""Workflow generation boundary and preference learning."""

from orchestrator.generation.generator import WorkflowGenerator
from orchestrator.generation.ingest import ingest_workflow
from orchestrator.generation.learning import PreferenceStore, compare_workflows

__all__ = [
    "PreferenceStore",
    "WorkflowGenerator",
    "compare_workflows",
    "ingest_workflow",
]
