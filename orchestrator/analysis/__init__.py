"""Analysis utilities for workflow graphs."""

from orchestrator.analysis.workflow_summary import (
    CategoryCount,
    WorkflowSummary,
    workflow_summary,
)

__all__ = [
    "CategoryCount",
    "WorkflowSummary",
    "workflow_summary",
]
