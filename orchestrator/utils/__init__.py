"""Utility functions for orchestrator."""

from orchestrator.utils.identifiers import (
    generate_instance_id,
    generate_record_id,
    generate_session_id,
    generate_template_id,
    generate_version_id,
    utc_timestamp,
)

__all__ = [
    "generate_instance_id",
    "generate_record_id",
    "generate_session_id",
    "generate_template_id",
    "generate_version_id",
    "utc_timestamp",
]
