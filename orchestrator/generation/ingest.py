"""Admission checks for workflows produced by the generator."""

import json

from pydantic import ValidationError

from orchestrator.errors import StructuralViolation, UpstreamGenerationFailure
from orchestrator.graph.validation import validate_steps
from orchestrator.models.workflow import Workflow

_FENCE = "```"


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    text = text.strip()
    if text.startswith(_FENCE) and text.endswith(_FENCE):
        text = text[len(_FENCE):-len(_FENCE)]
        if text.startswith("json"):
            text = text[len("json"):]
    return text.strip()


def ingest_workflow(payload: str | dict) -> Workflow:
    """Parse and validate a generated workflow.

    The graph must already have dense 1..N ids and only valid references;
    nothing is repaired. Any problem raises UpstreamGenerationFailure.
    """
    if isinstance(payload, str):
        try:
            payload = json.loads(_strip_code_fence(payload))
        except json.JSONDecodeError as e:
            raise UpstreamGenerationFailure(f"generator returned invalid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise UpstreamGenerationFailure("generator output must be a JSON object")

    try:
        workflow = Workflow.model_validate(payload)
    except ValidationError as e:
        raise UpstreamGenerationFailure(f"generator output has the wrong shape: {e}") from e

    try:
        validate_steps(workflow.steps)
    except StructuralViolation as e:
        raise UpstreamGenerationFailure(f"generated graph rejected: {e}") from e
    return workflow
