"""ID generation and timestamp utilities."""

import uuid
from datetime import datetime, timezone


def generate_template_id() -> str:
    """Generate a unique template ID (UUID4)."""
    return str(uuid.uuid4())


def generate_version_id() -> str:
    """Generate a unique template version ID (UUID4)."""
    return str(uuid.uuid4())


def generate_instance_id() -> str:
    """Generate a workflow instance ID (12-char hex string)."""
    return f"instance_{uuid.uuid4().hex[:12]}"


def generate_record_id(prefix: str) -> str:
    """Generate a prefixed ID for history and preference records."""
    return f"{prefix}_{uuid.uuid4().hex}"


def generate_session_id() -> str:
    """Generate a unique editor session ID (UUID4)."""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
