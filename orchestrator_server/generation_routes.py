"""API routes for AI-assisted workflow generation, history and agent types."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from orchestrator.generation.generator import WorkflowGenerator
from orchestrator.generation.learning import PreferenceStore
from orchestrator.library.agent_types import AgentTypeRegistry
from orchestrator.library.history import HistoryStore
from orchestrator.models.history import WorkflowHistoryEntry
from orchestrator_server.config import MODEL_NAME
from orchestrator_server.db import get_agent_types, get_history_store, get_preference_store
from orchestrator_server.sessions import SessionRegistry, get_sessions
from orchestrator_server.workflow_routes import SessionView, session_view

logger = logging.getLogger(__name__)

router = APIRouter()

# generator instance (lazily initialized)
_generator: WorkflowGenerator | None = None


def get_generator() -> WorkflowGenerator:
    global _generator
    if _generator is None:
        _generator = WorkflowGenerator(model=MODEL_NAME)
    return _generator


# --- Request/Response Models ---


class GenerateRequest(BaseModel):
    prompt: str = Field(min_length=1)


class AgentTypeRequest(BaseModel):
    name: str = Field(min_length=1)


# --- API Endpoints ---


@router.post("/generate")
def generate_workflow(
    request: GenerateRequest,
    generator: WorkflowGenerator = Depends(get_generator),
    history: HistoryStore = Depends(get_history_store),
    preferences: PreferenceStore = Depends(get_preference_store),
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    """Generate a workflow from a use case and open it in a new session.

    Failures of the model call or of the returned graph surface as 502.
    """
    history.save_prompt(request.prompt)
    try:
        workflow = generator.generate(request.prompt, preferences.build_learning_context())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    history.save_workflow(request.prompt, workflow)
    session = sessions.open(workflow, prompt=request.prompt)
    logger.info("opened session %s for generated workflow", session.session_id)
    return session_view(session)


@router.get("/history/prompts")
def list_prompt_history(history: HistoryStore = Depends(get_history_store)) -> list[str]:
    return history.get_prompt_history()


@router.get("/history/workflows")
def list_workflow_history(
    history: HistoryStore = Depends(get_history_store),
) -> list[WorkflowHistoryEntry]:
    return history.get_workflow_history()


@router.get("/agent-types")
def list_agent_types(registry: AgentTypeRegistry = Depends(get_agent_types)) -> list[str]:
    return registry.list_types()


@router.post("/agent-types")
def add_agent_type(
    request: AgentTypeRequest,
    registry: AgentTypeRegistry = Depends(get_agent_types),
) -> list[str]:
    if not registry.add_custom_type(request.name):
        raise HTTPException(status_code=409, detail=f"Agent type already exists: {request.name}")
    return registry.list_types()
