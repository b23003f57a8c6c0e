"""Dense renumbering of steps after a structural edit.

The edit decides the new order; this module gives every step the id of
its 1-based position and rewrites ``depends_on`` and ``prior_step_ids``
through the old-id -> new-id mapping. References to ids without a new
position (a deleted step) are dropped.
"""

from collections.abc import Sequence

from orchestrator.models.step import PriorOutputInput, Step


def build_id_mapping(old_ids: Sequence[int | None]) -> dict[int, int]:
    """Map each surviving old id to its new 1-based position.

    ``None`` marks a step that had no id before the edit (a fresh insert).
    """
    return {
        old_id: position
        for position, old_id in enumerate(old_ids, start=1)
        if old_id is not None
    }


def _remap(ids: Sequence[int], mapping: dict[int, int]) -> list[int]:
    return sorted({mapping[i] for i in ids if i in mapping})


def remap_step(step: Step, new_id: int, mapping: dict[int, int]) -> Step:
    """Return a copy of *step* with a new id and rewritten references."""
    update: dict = {
        "step_id": new_id,
        "depends_on": _remap(step.depends_on, mapping),
    }
    if isinstance(step.input_config, PriorOutputInput):
        update["input_config"] = step.input_config.model_copy(
            update={"prior_step_ids": _remap(step.input_config.prior_step_ids, mapping)}
        )
    return step.model_copy(update=update)


def renumber(steps: Sequence[Step], old_ids: Sequence[int | None]) -> list[Step]:
    """Renumber *steps* to 1..N in the given order.

    ``old_ids[i]`` is the id ``steps[i]`` carried before the edit. All
    references, including those of freshly inserted steps, are expressed
    in old ids.
    """
    if len(steps) != len(old_ids):
        raise ValueError("steps and old_ids must have the same length")
    mapping = build_id_mapping(old_ids)
    return [
        remap_step(step, position, mapping)
        for position, step in enumerate(steps, start=1)
    ]
