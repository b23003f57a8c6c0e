"""Step graph editing, layout and connector derivation."""

from orchestrator.graph.connectors import (
    Connector,
    EdgeKind,
    derive_connectors,
    effective_predecessors,
)
from orchestrator.graph.layout import Column, build_columns, flatten_columns
from orchestrator.graph.renumber import build_id_mapping, renumber
from orchestrator.graph.store import StepGraphStore
from orchestrator.graph.validation import validate_steps

__all__ = [
    "Column",
    "Connector",
    "EdgeKind",
    "StepGraphStore",
    "build_columns",
    "build_id_mapping",
    "derive_connectors",
    "effective_predecessors",
    "flatten_columns",
    "renumber",
    "validate_steps",
]
