"""Derive the predecessor edges a renderer draws between steps.

A step with explicit ``depends_on`` ids gets exactly those edges. A step
with none, other than the first, gets one derived edge from the step right
before it, which keeps freshly generated linear workflows connected.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from orchestrator.models.step import Step

logger = logging.getLogger(__name__)


class EdgeKind(str, Enum):
    explicit = "explicit"  # authored in depends_on
    derived = "derived"  # previous-step fallback


@dataclass(frozen=True)
class Connector:
    """A directed edge from a predecessor step to the step that waits on it."""

    source: int
    target: int
    kind: EdgeKind


def effective_predecessors(steps: Sequence[Step]) -> dict[int, list[Connector]]:
    """Map each step id to its incoming connectors, in step order.

    Edges whose predecessor is no longer part of the graph are left out.
    """
    present = {step.step_id for step in steps}
    incoming: dict[int, list[Connector]] = {}
    for index, step in enumerate(steps):
        edges: list[Connector] = []
        if step.depends_on:
            for source in step.depends_on:
                if source not in present:
                    logger.debug("skipping stale edge %s -> %s", source, step.step_id)
                    continue
                edges.append(Connector(source, step.step_id, EdgeKind.explicit))
        elif index > 0:
            edges.append(Connector(steps[index - 1].step_id, step.step_id, EdgeKind.derived))
        incoming[step.step_id] = edges
    return incoming


def derive_connectors(steps: Sequence[Step]) -> list[Connector]:
    """Flatten the incoming edges of every step into one list."""
    return [
        connector
        for edges in effective_predecessors(steps).values()
        for connector in edges
    ]
