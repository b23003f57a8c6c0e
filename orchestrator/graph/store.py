"""In-memory step graph with structural edits.

Every edit builds a candidate step list, renumbers it, validates the whole
candidate and only then swaps it in, so a rejected edit leaves the store
exactly as it was.
"""

import logging
from collections.abc import Sequence

from orchestrator.errors import StructuralViolation
from orchestrator.graph.renumber import renumber
from orchestrator.graph.validation import validate_steps
from orchestrator.models.step import ExecutionStatus, Step
from orchestrator.models.workflow import Workflow, WorkflowMetadata

logger = logging.getLogger(__name__)


class StepGraphStore:
    """Holds the ordered steps of one workflow being edited.

    Unknown step ids are not errors: the edit returns ``None`` and nothing
    changes. Edits that would break the graph raise StructuralViolation.

    Example::

        store = StepGraphStore()
        store.insert_after(None, Step(step_id=1, agent_type="Scraper"))
        store.insert_after(1, Step(step_id=1, agent_type="Content", depends_on=[1]))
        store.delete(1)  # the Content step becomes step 1, its dependency is dropped
    """

    def __init__(self, workflow: Workflow | None = None) -> None:
        self._metadata = WorkflowMetadata()
        self._steps: list[Step] = []
        if workflow is not None:
            self.load(workflow)

    # --- reads ---

    @property
    def metadata(self) -> WorkflowMetadata:
        return self._metadata

    @property
    def steps(self) -> list[Step]:
        return list(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def get(self, step_id: int) -> Step | None:
        index = self._index_of(step_id)
        return None if index is None else self._steps[index]

    def snapshot(self) -> Workflow:
        """A deep copy of the current graph."""
        return Workflow(metadata=self._metadata, steps=self._steps).model_copy(deep=True)

    # --- whole-graph replacement ---

    def load(self, workflow: Workflow) -> None:
        """Replace the whole graph, e.g. with a template or generated workflow."""
        steps = [step.model_copy(deep=True) for step in workflow.steps]
        validate_steps(steps)
        self._metadata = workflow.metadata.model_copy()
        self._steps = steps

    # --- structural edits ---

    def insert_after(self, anchor_id: int | None, step: Step) -> Step | None:
        """Insert *step* after *anchor_id*, or append when the anchor is None.

        The incoming ``step_id`` is ignored; references are in current ids.
        """
        if anchor_id is None:
            position = len(self._steps)
        else:
            index = self._index_of(anchor_id)
            if index is None:
                logger.debug("insert_after: unknown anchor %s", anchor_id)
                return None
            position = index + 1

        self._check_references(step, self_id=None)
        ordered = list(self._steps)
        ordered.insert(position, step)
        old_ids: list[int | None] = list(self._ids())
        old_ids.insert(position, None)
        committed = self._commit(ordered, old_ids)
        logger.debug("inserted step at position %d", position + 1)
        return committed[position]

    def delete(self, step_id: int) -> Step | None:
        """Remove a step; references to it are dropped from the survivors."""
        index = self._index_of(step_id)
        if index is None:
            logger.debug("delete: unknown step %s", step_id)
            return None
        removed = self._steps[index]
        ordered = self._steps[:index] + self._steps[index + 1:]
        old_ids = [step.step_id for step in ordered]
        self._commit(ordered, old_ids)
        logger.debug("deleted step %s", step_id)
        return removed

    def move(self, step_id: int, new_index: int) -> Step | None:
        """Move a step to *new_index* (0-based, clamped to the valid range)."""
        index = self._index_of(step_id)
        if index is None:
            logger.debug("move: unknown step %s", step_id)
            return None
        new_index = max(0, min(new_index, len(self._steps) - 1))
        ordered = list(self._steps)
        moving = ordered.pop(index)
        ordered.insert(new_index, moving)
        committed = self._commit(ordered, [step.step_id for step in ordered])
        logger.debug("moved step %s to position %d", step_id, new_index + 1)
        return committed[new_index]

    def reorder(self, new_order: Sequence[int]) -> list[Step]:
        """Put the steps in the order given by their current ids."""
        if sorted(new_order) != sorted(self._ids()):
            raise StructuralViolation(
                f"reorder needs a permutation of {sorted(self._ids())}, got {list(new_order)}"
            )
        by_id = {step.step_id: step for step in self._steps}
        ordered = [by_id[step_id] for step_id in new_order]
        return list(self._commit(ordered, list(new_order)))

    def update_step(self, step_id: int, step: Step) -> Step | None:
        """Replace the content of one step, keeping its position and id."""
        index = self._index_of(step_id)
        if index is None:
            logger.debug("update_step: unknown step %s", step_id)
            return None
        replacement = step.model_copy(update={"step_id": step_id})
        self._check_references(replacement, self_id=step_id)
        ordered = list(self._steps)
        ordered[index] = replacement
        committed = self._commit(ordered, list(self._ids()))
        return committed[index]

    def set_execution_status(self, step_id: int, status: ExecutionStatus | None) -> Step | None:
        """Change display state only; never renumbers."""
        index = self._index_of(step_id)
        if index is None:
            return None
        updated = self._steps[index].model_copy(update={"execution_status": status})
        self._steps[index] = updated
        return updated

    # --- internals ---

    def _ids(self) -> list[int]:
        return [step.step_id for step in self._steps]

    def _index_of(self, step_id: int) -> int | None:
        for index, step in enumerate(self._steps):
            if step.step_id == step_id:
                return index
        return None

    def _check_references(self, step: Step, self_id: int | None) -> None:
        """New or edited content may only point at existing, other steps."""
        refs = step.referenced_ids()
        if self_id is not None and self_id in refs:
            raise StructuralViolation(f"step {self_id} references itself")
        dangling = sorted(refs - set(self._ids()))
        if dangling:
            raise StructuralViolation(f"references to missing steps {dangling}")

    def _commit(self, ordered: list[Step], old_ids: list[int | None]) -> list[Step]:
        candidate = renumber(ordered, old_ids)
        validate_steps(candidate)
        self._steps = candidate
        return candidate
