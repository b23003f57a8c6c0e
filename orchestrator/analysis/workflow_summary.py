"""Basic statistics about a workflow graph for dashboards."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from orchestrator.graph.connectors import EdgeKind, derive_connectors
from orchestrator.graph.layout import build_columns
from orchestrator.models.step import Step


@dataclass
class CategoryCount:
    name: str
    count: int


@dataclass
class WorkflowSummary:
    """Summary of a workflow's composition and shape."""

    step_count: int
    column_count: int
    agent_composition: list[CategoryCount] = field(default_factory=list)
    timing_breakdown: list[CategoryCount] = field(default_factory=list)
    parallel_groups: dict[str, list[int]] = field(default_factory=dict)
    explicit_edges: int = 0
    derived_edges: int = 0


def _counts(values: list[str]) -> list[CategoryCount]:
    # Counter keeps first-seen order, so categories appear in step order
    return [CategoryCount(name, count) for name, count in Counter(values).items()]


def workflow_summary(steps: Sequence[Step]) -> WorkflowSummary:
    """Compute agent composition, timing mix, parallel groups and edge counts."""
    columns = build_columns(steps)
    connectors = derive_connectors(steps)

    groups: dict[str, list[int]] = {}
    for column in columns:
        if column.parallel_group is not None:
            groups[column.parallel_group] = column.step_ids

    return WorkflowSummary(
        step_count=len(steps),
        column_count=len(columns),
        agent_composition=_counts([step.agent_type for step in steps]),
        timing_breakdown=_counts([step.timing_logic.kind for step in steps]),
        parallel_groups=groups,
        explicit_edges=sum(1 for c in connectors if c.kind == EdgeKind.explicit),
        derived_edges=sum(1 for c in connectors if c.kind == EdgeKind.derived),
    )
