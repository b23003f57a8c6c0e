"""Structural checks for a step graph.

A graph is valid when its ids are exactly 1..N, every referenced id names
a present step other than the referencing one, and the dependency relation
(explicit edges plus derived previous-step edges) has no cycle.
"""

from collections import deque
from collections.abc import Sequence

from orchestrator.errors import StructuralViolation
from orchestrator.graph.connectors import effective_predecessors
from orchestrator.models.step import Step


def check_dense_ids(steps: Sequence[Step]) -> None:
    ids = [step.step_id for step in steps]
    if len(set(ids)) != len(ids):
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        raise StructuralViolation(f"duplicate step ids: {duplicates}")
    # ids follow positions: the n-th step is step n
    if ids != list(range(1, len(steps) + 1)):
        raise StructuralViolation(
            f"step ids must be 1..{len(steps)} in order, got {ids}"
        )


def check_references(steps: Sequence[Step]) -> None:
    present = {step.step_id for step in steps}
    for step in steps:
        refs = step.referenced_ids()
        if step.step_id in refs:
            raise StructuralViolation(f"step {step.step_id} references itself")
        dangling = sorted(refs - present)
        if dangling:
            raise StructuralViolation(
                f"step {step.step_id} references missing steps {dangling}"
            )


def check_acyclic(steps: Sequence[Step]) -> None:
    """Kahn's algorithm over the effective predecessor relation."""
    incoming = effective_predecessors(steps)
    indegree = {step_id: len(edges) for step_id, edges in incoming.items()}
    successors: dict[int, list[int]] = {step_id: [] for step_id in incoming}
    for edges in incoming.values():
        for edge in edges:
            successors[edge.source].append(edge.target)

    ready = deque(step_id for step_id, degree in indegree.items() if degree == 0)
    visited = 0
    while ready:
        current = ready.popleft()
        visited += 1
        for target in successors[current]:
            indegree[target] -= 1
            if indegree[target] == 0:
                ready.append(target)

    if visited != len(indegree):
        stuck = sorted(step_id for step_id, degree in indegree.items() if degree > 0)
        raise StructuralViolation(f"dependency cycle through steps {stuck}")


def validate_steps(steps: Sequence[Step]) -> None:
    """Raise StructuralViolation unless the ordered steps form a valid graph."""
    check_dense_ids(steps)
    check_references(steps)
    check_acyclic(steps)
