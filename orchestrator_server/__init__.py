"""HTTP API for the workflow editor."""
