"""Integration tests for the HTTP API, on in-memory storage."""

import json

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from orchestrator.generation.generator import WorkflowGenerator
from orchestrator.storage.ports import InMemoryStorage
from orchestrator_server.app import app
from orchestrator_server.db import get_storage
from orchestrator_server.generation_routes import get_generator
from orchestrator_server.sessions import SessionRegistry, get_sessions


GENERATED = {
    "workflow_metadata": {"workflow_name": "Newsletter"},
    "steps": [
        {"step_id": 1, "agent_type": "Content", "timing_logic": "Manual"},
        {"step_id": 2, "agent_type": "Design", "timing_logic": "Auto", "depends_on": [1]},
    ],
}


class _StubLLM:
    def __init__(self, content):
        self.content = content

    def invoke(self, messages):
        return AIMessage(content=self.content)


class _FailingLLM:
    def invoke(self, messages):
        raise ConnectionError("upstream unavailable")


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def client(storage):
    sessions = SessionRegistry()
    generator = WorkflowGenerator(llm=_StubLLM(json.dumps(GENERATED)))
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_sessions] = lambda: sessions
    app.dependency_overrides[get_generator] = lambda: generator
    yield TestClient(app)
    app.dependency_overrides.clear()


def _open(client, steps=None):
    body = {"workflow": {"steps": steps}} if steps is not None else {}
    response = client.post("/api/sessions", json=body)
    assert response.status_code == 200
    return response.json()


def _ids(view):
    return [step["step_id"] for step in view["workflow"]["steps"]]


class TestSessionEditing:
    """Test structural edits through the session endpoints."""

    def test_health(self, client):
        assert client.get("/").json()["status"] == "ok"

    def test_insert_and_delete(self, client):
        view = _open(client)
        sid = view["session_id"]
        client.post(f"/api/sessions/{sid}/steps", json={"step": {"agent_type": "Scraper"}})
        view = client.post(
            f"/api/sessions/{sid}/steps",
            json={"step": {"agent_type": "CRM", "depends_on": [1]}},
        ).json()
        assert _ids(view) == [1, 2]
        assert view["connectors"] == [{"source": 1, "target": 2, "kind": "explicit"}]

        view = client.delete(f"/api/sessions/{sid}/steps/1").json()
        assert _ids(view) == [1]
        assert view["workflow"]["steps"][0]["depends_on"] == []

    def test_columns_in_view(self, client):
        view = _open(
            client,
            [
                {"step_id": 1, "agent_type": "A", "parallel_group": "g"},
                {"step_id": 2, "agent_type": "B"},
                {"step_id": 3, "agent_type": "C", "parallel_group": "g"},
            ],
        )
        assert [c["step_ids"] for c in view["columns"]] == [[1, 3], [2]]

    def test_dangling_insert_is_conflict(self, client):
        sid = _open(client)["session_id"]
        response = client.post(
            f"/api/sessions/{sid}/steps",
            json={"step": {"agent_type": "CRM", "depends_on": [5]}},
        )
        assert response.status_code == 409
        assert _ids(client.get(f"/api/sessions/{sid}").json()) == []

    def test_invalid_step_body(self, client):
        sid = _open(client)["session_id"]
        response = client.post(f"/api/sessions/{sid}/steps", json={"step": {"depends_on": []}})
        assert response.status_code == 422

    def test_invalid_initial_graph_is_conflict(self, client):
        response = client.post(
            "/api/sessions",
            json={"workflow": {"steps": [{"step_id": 2, "agent_type": "CRM"}]}},
        )
        assert response.status_code == 409

    def test_unknown_ids_are_not_found(self, client):
        sid = _open(client, [{"step_id": 1, "agent_type": "CRM"}])["session_id"]
        assert client.get("/api/sessions/missing").status_code == 404
        assert client.delete(f"/api/sessions/{sid}/steps/7").status_code == 404
        assert client.post(f"/api/sessions/{sid}/steps/7/move", json={"index": 0}).status_code == 404
        response = client.post(
            f"/api/sessions/{sid}/steps",
            json={"after": 7, "step": {"agent_type": "CRM"}},
        )
        assert response.status_code == 404

    def test_move_reorder_and_update(self, client):
        sid = _open(
            client,
            [
                {"step_id": 1, "agent_type": "A"},
                {"step_id": 2, "agent_type": "B"},
                {"step_id": 3, "agent_type": "C"},
            ],
        )["session_id"]

        view = client.post(f"/api/sessions/{sid}/steps/3/move", json={"index": 0}).json()
        assert [s["agent_type"] for s in view["workflow"]["steps"]] == ["C", "A", "B"]

        view = client.put(f"/api/sessions/{sid}/order", json={"order": [2, 3, 1]}).json()
        assert [s["agent_type"] for s in view["workflow"]["steps"]] == ["A", "B", "C"]

        bad = client.put(f"/api/sessions/{sid}/order", json={"order": [1, 1, 2]})
        assert bad.status_code == 409

        view = client.put(f"/api/sessions/{sid}/steps/2", json={"agent_type": "Analytics"}).json()
        assert view["workflow"]["steps"][1]["agent_type"] == "Analytics"

        view = client.put(f"/api/sessions/{sid}/steps/2/status", json={"status": "running"}).json()
        assert view["workflow"]["steps"][1]["execution_status"] == "running"

    def test_summary(self, client):
        sid = _open(client, [{"step_id": 1, "agent_type": "CRM"}, {"step_id": 2, "agent_type": "CRM"}])[
            "session_id"
        ]
        summary = client.get(f"/api/sessions/{sid}/summary").json()
        assert summary["step_count"] == 2
        assert summary["derived_edges"] == 1

    def test_close_session(self, client):
        sid = _open(client)["session_id"]
        assert client.delete(f"/api/sessions/{sid}").status_code == 200
        assert client.get(f"/api/sessions/{sid}").status_code == 404


class TestTemplateEndpoints:
    """Test saving, versioning and sharing templates."""

    def test_save_from_session_and_version(self, client):
        sid = _open(client, [{"step_id": 1, "agent_type": "Content"}])["session_id"]
        first = client.post("/api/templates", json={"name": "Flow", "session_id": sid})
        assert first.status_code == 200
        assert first.json()["versions"] == []

        client.post(f"/api/sessions/{sid}/steps", json={"step": {"agent_type": "Design"}})
        second = client.post(
            "/api/templates",
            json={"name": "Flow", "session_id": sid, "change_note": "add design"},
        ).json()
        assert second["id"] == first.json()["id"]
        assert len(second["versions"]) == 1
        assert second["versions"][0]["changeNote"] == "add design"

        listing = client.get("/api/templates").json()
        assert listing[0]["version_count"] == 1
        assert listing[0]["step_count"] == 2

    def test_restore_clone_delete(self, client):
        workflow_v1 = {"steps": [{"step_id": 1, "agent_type": "Content"}]}
        workflow_v2 = {"steps": [{"step_id": 1, "agent_type": "Design"}]}
        client.post("/api/templates", json={"name": "Flow", "workflow": workflow_v1})
        template = client.post("/api/templates", json={"name": "Flow", "workflow": workflow_v2}).json()
        tid = template["id"]
        vid = template["versions"][0]["id"]

        restored = client.post(f"/api/templates/{tid}/versions/{vid}/restore").json()
        assert restored["workflow"]["steps"][0]["agent_type"] == "Content"
        assert len(restored["versions"]) == 2

        assert client.post(f"/api/templates/{tid}/versions/missing/restore").status_code == 404

        cloned = client.post(f"/api/templates/{tid}/clone").json()
        assert cloned["name"] == "Flow (Copy)"

        assert client.delete(f"/api/templates/{tid}").status_code == 200
        assert client.get(f"/api/templates/{tid}").status_code == 404
        assert client.delete(f"/api/templates/{tid}").status_code == 404

    def test_save_requires_a_workflow(self, client):
        assert client.post("/api/templates", json={"name": "Flow"}).status_code == 422

    def test_save_invalid_graph_is_conflict(self, client):
        response = client.post(
            "/api/templates",
            json={"name": "Flow", "workflow": {"steps": [{"step_id": 3, "agent_type": "CRM"}]}},
        )
        assert response.status_code == 409

    def test_export_import_and_open(self, client):
        template = client.post(
            "/api/templates",
            json={"name": "Flow", "workflow": {"steps": [{"step_id": 1, "agent_type": "CRM"}]}},
        ).json()
        exported = client.get(f"/api/templates/{template['id']}/export")
        assert exported.headers["content-type"].startswith("application/json")

        imported = client.post("/api/templates/import", json={"content": exported.text}).json()
        assert imported["id"] != template["id"]
        assert imported["name"] == "Flow (2)"

        malformed = client.post("/api/templates/import", json={"content": "{}"})
        assert malformed.status_code == 422

        view = client.post(f"/api/templates/{imported['id']}/open").json()
        assert _ids(view) == [1]


class TestGenerationEndpoints:
    """Test generation, history, feedback and agent types."""

    def test_generate_opens_session_and_records_history(self, client):
        response = client.post("/api/generate", json={"prompt": "weekly newsletter"})
        assert response.status_code == 200
        view = response.json()
        assert _ids(view) == [1, 2]
        assert view["workflow"]["metadata"]["name"] == "Newsletter"

        assert client.get("/api/history/prompts").json() == ["weekly newsletter"]
        workflows = client.get("/api/history/workflows").json()
        assert workflows[0]["prompt"] == "weekly newsletter"

    def test_feedback_after_edit(self, client):
        sid = client.post("/api/generate", json={"prompt": "newsletter"}).json()["session_id"]
        client.put(f"/api/sessions/{sid}/steps/1", json={"agent_type": "Outreach"})

        preference = client.post(f"/api/sessions/{sid}/feedback").json()
        assert preference["agent_type_changes"] == {"Outreach": 1}

    def test_feedback_requires_generated_session(self, client):
        sid = _open(client)["session_id"]
        assert client.post(f"/api/sessions/{sid}/feedback").status_code == 409

    def test_generation_failure_is_bad_gateway(self, client):
        app.dependency_overrides[get_generator] = lambda: WorkflowGenerator(llm=_FailingLLM())
        response = client.post("/api/generate", json={"prompt": "newsletter"})
        assert response.status_code == 502
        assert "upstream unavailable" in response.json()["detail"]

    def test_agent_types(self, client):
        types = client.get("/api/agent-types").json()
        assert "Scraper" in types
        added = client.post("/api/agent-types", json={"name": "Translator"}).json()
        assert added[-1] == "Translator"
        assert client.post("/api/agent-types", json={"name": "Translator"}).status_code == 409


class TestSessionRegistry:
    """Test the bound on open editor sessions."""

    def test_oldest_session_is_evicted(self):
        registry = SessionRegistry(max_sessions=2)
        first = registry.open()
        second = registry.open()
        third = registry.open()

        assert len(registry) == 2
        assert registry.get(first.session_id) is None
        assert registry.get(second.session_id) is second
        assert registry.get(third.session_id) is third

    def test_closed_sessions_free_a_slot(self):
        registry = SessionRegistry(max_sessions=2)
        first = registry.open()
        second = registry.open()
        registry.close(second.session_id)
        registry.open()
        assert registry.get(first.session_id) is first

    def test_evicted_session_is_not_found_over_http(self, client):
        registry = SessionRegistry(max_sessions=1)
        app.dependency_overrides[get_sessions] = lambda: registry
        sid = _open(client)["session_id"]
        _open(client)
        assert client.get(f"/api/sessions/{sid}").status_code == 404
