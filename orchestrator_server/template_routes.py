"""API routes for template management and version history."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from orchestrator.models.template import Template
from orchestrator.models.workflow import Workflow
from orchestrator.templates.store import TemplateStore
from orchestrator_server.db import get_template_store
from orchestrator_server.sessions import SessionRegistry, get_sessions
from orchestrator_server.workflow_routes import SessionView, session_view

router = APIRouter()


# --- Request/Response Models ---


class SaveTemplateRequest(BaseModel):
    """Save a workflow, given inline or taken from an editor session."""

    name: str = Field(min_length=1)
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    change_note: str = ""
    workflow: Workflow | None = None
    session_id: str | None = None


class ImportTemplateRequest(BaseModel):
    content: str  # exported template JSON


class TemplateListItem(BaseModel):
    """Summary item for listing templates."""

    id: str
    name: str
    description: str
    tags: list[str]
    step_count: int
    version_count: int
    created_at: str
    updated_at: str


# --- Helper Functions ---


def _template_not_found(template_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Template not found: {template_id}")


def _resolve_workflow(request: SaveTemplateRequest, sessions: SessionRegistry) -> Workflow:
    if request.session_id is not None:
        session = sessions.get(request.session_id)
        if not session:
            raise HTTPException(
                status_code=404,
                detail=f"Session not found: {request.session_id}",
            )
        return session.store.snapshot()
    if request.workflow is None:
        raise HTTPException(status_code=422, detail="Provide either workflow or session_id")
    return request.workflow


# --- API Endpoints ---


@router.get("/templates")
def list_templates(store: TemplateStore = Depends(get_template_store)) -> list[TemplateListItem]:
    """List all templates, most recently updated first."""
    return [
        TemplateListItem(
            id=t.id,
            name=t.name,
            description=t.description,
            tags=t.tags,
            step_count=len(t.workflow.steps),
            version_count=len(t.versions),
            created_at=t.created_at,
            updated_at=t.updated_at,
        )
        for t in store.list_templates()
    ]


@router.get("/templates/{template_id}")
def get_template(
    template_id: str,
    store: TemplateStore = Depends(get_template_store),
) -> Template:
    template = store.get(template_id)
    if not template:
        raise _template_not_found(template_id)
    return template


@router.post("/templates")
def save_template(
    request: SaveTemplateRequest,
    store: TemplateStore = Depends(get_template_store),
    sessions: SessionRegistry = Depends(get_sessions),
) -> Template:
    """Create a template, or version an existing one with the same name."""
    workflow = _resolve_workflow(request, sessions)
    try:
        return store.save(
            request.name,
            workflow,
            description=request.description,
            tags=request.tags,
            change_note=request.change_note,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


@router.post("/templates/import")
def import_template(
    request: ImportTemplateRequest,
    store: TemplateStore = Depends(get_template_store),
) -> Template:
    template = store.import_json(request.content)
    if not template:
        raise HTTPException(status_code=422, detail="Malformed template record")
    return template


@router.post("/templates/{template_id}/versions/{version_id}/restore")
def restore_version(
    template_id: str,
    version_id: str,
    store: TemplateStore = Depends(get_template_store),
) -> Template:
    """Roll back to a version; the replaced graph is kept as a new version."""
    template = store.restore(template_id, version_id)
    if not template:
        raise HTTPException(
            status_code=404,
            detail=f"Version not found: {template_id}/{version_id}",
        )
    return template


@router.post("/templates/{template_id}/clone")
def clone_template(
    template_id: str,
    store: TemplateStore = Depends(get_template_store),
) -> Template:
    cloned = store.clone(template_id)
    if not cloned:
        raise _template_not_found(template_id)
    return cloned


@router.delete("/templates/{template_id}")
def delete_template(
    template_id: str,
    store: TemplateStore = Depends(get_template_store),
) -> dict:
    """Delete a template and its whole version history."""
    if not store.delete(template_id):
        raise _template_not_found(template_id)
    return {"deleted": template_id}


@router.get("/templates/{template_id}/export")
def export_template(
    template_id: str,
    store: TemplateStore = Depends(get_template_store),
) -> Response:
    content = store.export_json(template_id)
    if content is None:
        raise _template_not_found(template_id)
    return Response(content=content, media_type="application/json")


@router.post("/templates/{template_id}/open")
def open_template(
    template_id: str,
    store: TemplateStore = Depends(get_template_store),
    sessions: SessionRegistry = Depends(get_sessions),
) -> SessionView:
    """Load a template's current graph into a new editor session."""
    template = store.get(template_id)
    if not template:
        raise _template_not_found(template_id)
    return session_view(sessions.open(template.workflow))
