"""Tests for column layout and connector derivation."""

from orchestrator.graph.connectors import (
    Connector,
    EdgeKind,
    derive_connectors,
    effective_predecessors,
)
from orchestrator.graph.layout import build_columns, flatten_columns
from orchestrator.models.step import Step


def _step(step_id, depends_on=None, group=None):
    return Step(
        step_id=step_id,
        agent_type="Analytics",
        depends_on=depends_on or [],
        parallel_group=group,
    )


class TestBuildColumns:
    """Test grouping of steps into rendering columns."""

    def test_empty_graph_has_no_columns(self):
        assert build_columns([]) == []

    def test_untagged_steps_get_one_column_each(self):
        columns = build_columns([_step(1), _step(2), _step(3)])
        assert [c.step_ids for c in columns] == [[1], [2], [3]]
        assert [c.rank for c in columns] == [0, 1, 2]
        assert all(c.parallel_group is None for c in columns)

    def test_group_pulls_later_members_forward(self):
        """[A(g), B, C(g)] renders as [[A, C], [B]]."""
        columns = build_columns([_step(1, group="g"), _step(2), _step(3, group="g")])
        assert [c.step_ids for c in columns] == [[1, 3], [2]]
        assert columns[0].parallel_group == "g"
        assert columns[1].parallel_group is None

    def test_interleaved_groups(self):
        steps = [
            _step(1, group="g1"),
            _step(2, group="g2"),
            _step(3, group="g1"),
            _step(4, group="g2"),
        ]
        columns = build_columns(steps)
        assert [c.step_ids for c in columns] == [[1, 3], [2, 4]]

    def test_every_step_placed_once(self):
        steps = [
            _step(1),
            _step(2, group="a"),
            _step(3),
            _step(4, group="a"),
            _step(5, group="b"),
            _step(6, group="a"),
        ]
        columns = build_columns(steps)
        placed = [step_id for c in columns for step_id in c.step_ids]
        assert sorted(placed) == [1, 2, 3, 4, 5, 6]
        assert len(placed) == len(set(placed))
        groups = [c.parallel_group for c in columns if c.parallel_group]
        assert len(groups) == len(set(groups))

    def test_layout_is_idempotent(self):
        steps = [_step(1, group="g"), _step(2), _step(3, group="g"), _step(4)]
        first = build_columns(steps)
        second = build_columns(flatten_columns(first))
        assert [c.step_ids for c in second] == [c.step_ids for c in first]


class TestConnectors:
    """Test explicit and derived predecessor edges."""

    def test_linear_steps_get_derived_edges(self):
        connectors = derive_connectors([_step(1), _step(2), _step(3)])
        assert connectors == [
            Connector(1, 2, EdgeKind.derived),
            Connector(2, 3, EdgeKind.derived),
        ]

    def test_first_step_has_no_incoming_edge(self):
        incoming = effective_predecessors([_step(1), _step(2)])
        assert incoming[1] == []

    def test_explicit_dependencies_replace_fallback(self):
        connectors = derive_connectors([_step(1), _step(2), _step(3, depends_on=[1])])
        assert Connector(1, 3, EdgeKind.explicit) in connectors
        assert Connector(2, 3, EdgeKind.derived) not in connectors

    def test_fan_in(self):
        steps = [_step(1), _step(2, depends_on=[1]), _step(3, depends_on=[1, 2])]
        incoming = effective_predecessors(steps)
        assert [c.source for c in incoming[3]] == [1, 2]
        assert all(c.kind == EdgeKind.explicit for c in incoming[3])

    def test_stale_predecessor_is_omitted(self):
        """A dependency on a step that no longer exists draws nothing."""
        steps = [_step(1), _step(2, depends_on=[9])]
        assert effective_predecessors(steps)[2] == []

    def test_parallel_members_each_wait_on_their_deps(self):
        steps = [_step(1), _step(2, depends_on=[1], group="g"), _step(3, depends_on=[1], group="g")]
        connectors = derive_connectors(steps)
        assert connectors == [
            Connector(1, 2, EdgeKind.explicit),
            Connector(1, 3, EdgeKind.explicit),
        ]
