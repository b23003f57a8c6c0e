"""Template persistence with version history."""

from orchestrator.templates.store import (
    TEMPLATES_KEY,
    TemplateStore,
    parse_template_record,
    unique_name,
    without_run_state,
)

__all__ = [
    "TEMPLATES_KEY",
    "TemplateStore",
    "parse_template_record",
    "unique_name",
    "without_run_state",
]
