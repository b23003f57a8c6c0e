"""In-process editor sessions, one StepGraphStore per session."""

import logging
from dataclasses import dataclass

from orchestrator.graph.store import StepGraphStore
from orchestrator.models.workflow import Workflow
from orchestrator.utils.identifiers import generate_session_id
from orchestrator_server.config import MAX_SESSIONS

logger = logging.getLogger(__name__)


@dataclass
class EditorSession:
    session_id: str
    store: StepGraphStore
    origin: Workflow | None = None  # graph as generated, for preference learning
    prompt: str | None = None


class SessionRegistry:
    """Open editor sessions keyed by id. Not thread-safe.

    Holds at most *max_sessions*; opening one more closes the oldest.
    """

    def __init__(self, max_sessions: int = MAX_SESSIONS) -> None:
        self.max_sessions = max_sessions
        self._sessions: dict[str, EditorSession] = {}

    def open(
        self,
        workflow: Workflow | None = None,
        prompt: str | None = None,
    ) -> EditorSession:
        """Start a session; raises StructuralViolation for an invalid graph."""
        store = StepGraphStore(workflow)
        session = EditorSession(
            session_id=generate_session_id(),
            store=store,
            origin=store.snapshot() if prompt is not None else None,
            prompt=prompt,
        )
        self._sessions[session.session_id] = session
        while len(self._sessions) > self.max_sessions:
            oldest = next(iter(self._sessions))
            del self._sessions[oldest]
            logger.info("evicted editor session %s", oldest)
        return session

    def get(self, session_id: str) -> EditorSession | None:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


_registry = SessionRegistry()


def get_sessions() -> SessionRegistry:
    return _registry
