"""Column layout: group steps into rendering ranks.

Steps are scanned in order. A step with a ``parallel_group`` pulls every
not-yet-placed step of the same group into its column, wherever those
steps sit in the sequence, so a group is never split. Any other step gets
a column of its own. A column's rank is set by its first member.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from orchestrator.models.step import Step


@dataclass(frozen=True)
class Column:
    rank: int
    steps: tuple[Step, ...]
    parallel_group: str | None = None

    @property
    def step_ids(self) -> list[int]:
        return [step.step_id for step in self.steps]


def build_columns(steps: Sequence[Step]) -> list[Column]:
    placed: set[int] = set()
    columns: list[Column] = []
    for index, step in enumerate(steps):
        if index in placed:
            continue
        group = step.parallel_group
        if group is None:
            members = [index]
        else:
            members = [
                later
                for later in range(index, len(steps))
                if later not in placed and steps[later].parallel_group == group
            ]
        placed.update(members)
        columns.append(
            Column(
                rank=len(columns),
                steps=tuple(steps[i] for i in members),
                parallel_group=group,
            )
        )
    return columns


def flatten_columns(columns: Sequence[Column]) -> list[Step]:
    """The step order implied by a column list."""
    return [step for column in columns for step in column.steps]
