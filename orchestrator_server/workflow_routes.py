"""API routes for editing a workflow graph inside an editor session."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from orchestrator.analysis.workflow_summary import WorkflowSummary, workflow_summary
from orchestrator.generation.learning import PreferenceStore
from orchestrator.graph.connectors import EdgeKind, derive_connectors
from orchestrator.graph.layout import build_columns
from orchestrator.models.history import LearnedPreference
from orchestrator.models.step import ExecutionStatus, Step
from orchestrator.models.workflow import Workflow
from orchestrator_server.db import get_preference_store
from orchestrator_server.sessions import EditorSession, SessionRegistry, get_sessions

router = APIRouter()


# --- Request/Response Models ---


class ColumnView(BaseModel):
    rank: int
    parallel_group: str | None
    step_ids: list[int]


class ConnectorView(BaseModel):
    source: int
    target: int
    kind: EdgeKind


class SessionView(BaseModel):
    """The current graph plus everything a renderer needs to draw it."""

    session_id: str
    workflow: Workflow
    columns: list[ColumnView]
    connectors: list[ConnectorView]


class OpenSessionRequest(BaseModel):
    workflow: Workflow | None = None


class InsertStepRequest(BaseModel):
    """Step content without an id; the position decides the id."""

    after: int | None = None  # None appends
    step: dict[str, Any]


class MoveStepRequest(BaseModel):
    index: int  # 0-based target position


class ReorderRequest(BaseModel):
    order: list[int]


class StatusRequest(BaseModel):
    status: ExecutionStatus | None = None


# --- Helper Functions ---


def session_view(session: EditorSession) -> SessionView:
    steps = session.store.steps
    return SessionView(
        session_id=session.session_id,
        workflow=session.store.snapshot(),
        columns=[
            ColumnView(rank=c.rank, parallel_group=c.parallel_group, step_ids=c.step_ids)
            for c in build_columns(steps)
        ],
        connectors=[
            ConnectorView(source=c.source, target=c.target, kind=c.kind)
            for c in derive_connectors(steps)
        ],
    )


def _get_session(sessions: SessionRegistry, session_id: str) -> EditorSession:
    session = sessions.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return session


def _parse_step(data: dict[str, Any], step_id: int) -> Step:
    """Validate step content from a request body under the given id."""
    try:
        return Step.model_validate({**data, "step_id": step_id})
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False),
        ) from e


def _step_not_found(step_id: int) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Step not found: {step_id}")


# --- API Endpoints ---


@router.post("/sessions")
def open_session(
    request: OpenSessionRequest,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    """Open an editor session on a workflow (or an empty one)."""
    return session_view(sessions.open(request.workflow))


@router.get("/sessions/{session_id}")
def get_session(
    session_id: str,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    return session_view(_get_session(sessions, session_id))


@router.delete("/sessions/{session_id}")
def close_session(
    session_id: str,
    sessions: SessionRegistry = Depends(get_sessions),
) -> dict:
    if not sessions.close(session_id):
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {"closed": session_id}


@router.post("/sessions/{session_id}/steps")
def insert_step(
    session_id: str,
    request: InsertStepRequest,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    """Insert a step after another one, or append it."""
    session = _get_session(sessions, session_id)
    step = _parse_step(request.step, step_id=len(session.store) + 1)
    if session.store.insert_after(request.after, step) is None:
        raise _step_not_found(request.after)
    return session_view(session)


@router.put("/sessions/{session_id}/steps/{step_id}")
def update_step(
    session_id: str,
    step_id: int,
    body: dict[str, Any],
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    session = _get_session(sessions, session_id)
    if session.store.update_step(step_id, _parse_step(body, step_id)) is None:
        raise _step_not_found(step_id)
    return session_view(session)


@router.delete("/sessions/{session_id}/steps/{step_id}")
def delete_step(
    session_id: str,
    step_id: int,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    """Delete a step; later steps are renumbered."""
    session = _get_session(sessions, session_id)
    if session.store.delete(step_id) is None:
        raise _step_not_found(step_id)
    return session_view(session)


@router.post("/sessions/{session_id}/steps/{step_id}/move")
def move_step(
    session_id: str,
    step_id: int,
    request: MoveStepRequest,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    session = _get_session(sessions, session_id)
    if session.store.move(step_id, request.index) is None:
        raise _step_not_found(step_id)
    return session_view(session)


@router.put("/sessions/{session_id}/order")
def reorder_steps(
    session_id: str,
    request: ReorderRequest,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    session = _get_session(sessions, session_id)
    session.store.reorder(request.order)
    return session_view(session)


@router.put("/sessions/{session_id}/steps/{step_id}/status")
def set_step_status(
    session_id: str,
    step_id: int,
    request: StatusRequest,
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    session = _get_session(sessions, session_id)
    if session.store.set_execution_status(step_id, request.status) is None:
        raise _step_not_found(step_id)
    return session_view(session)


@router.get("/sessions/{session_id}/summary")
def get_summary(
    session_id: str,
    sessions: SessionRegistry = Depends(get_sessions),
) -> WorkflowSummary:
    return workflow_summary(_get_session(sessions, session_id).store.steps)


@router.post("/sessions/{session_id}/feedback")
def record_feedback(
    session_id: str,
    sessions: SessionRegistry = Depends(get_sessions),
    preferences: PreferenceStore = Depends(get_preference_store),
) -> LearnedPreference:
    """Learn from the edits made to a generated workflow."""
    session = _get_session(sessions, session_id)
    if session.origin is None or session.prompt is None:
        raise HTTPException(
            status_code=409,
            detail=f"Session was not generated from a prompt: {session_id}",
        )
    return preferences.record_feedback(session.prompt, session.origin, session.store.snapshot())
