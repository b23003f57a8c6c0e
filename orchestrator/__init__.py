"""Orchestrator - editor core for multi-step agent workflows."""

from orchestrator.errors import (
    MalformedImport,
    OrchestratorError,
    StructuralViolation,
    UpstreamGenerationFailure,
)
from orchestrator.graph import (
    Column,
    Connector,
    EdgeKind,
    StepGraphStore,
    build_columns,
    derive_connectors,
)
from orchestrator.models import (
    Step,
    Template,
    TemplateVersion,
    Workflow,
    WorkflowMetadata,
)
from orchestrator.storage import FileStorage, InMemoryStorage, SqliteStorage, StoragePort
from orchestrator.templates import TemplateStore

__all__ = [
    # Errors
    "MalformedImport",
    "OrchestratorError",
    "StructuralViolation",
    "UpstreamGenerationFailure",
    # Graph editing
    "Column",
    "Connector",
    "EdgeKind",
    "StepGraphStore",
    "build_columns",
    "derive_connectors",
    # Models
    "Step",
    "Template",
    "TemplateVersion",
    "Workflow",
    "WorkflowMetadata",
    # Persistence
    "FileStorage",
    "InMemoryStorage",
    "SqliteStorage",
    "StoragePort",
    "TemplateStore",
]
