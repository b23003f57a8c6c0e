"""Template models for named, versioned workflow snapshots."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from orchestrator.models.workflow import Workflow


class TemplateVersion(BaseModel):
    """An immutable snapshot of a template's graph.

    Versions are appended to a template's chain and never modified or
    removed afterwards.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    version: int = Field(ge=1)  # 1-based, monotonic per template
    workflow: Workflow
    saved_at: str
    change_note: str = ""


class Template(BaseModel):
    """A named workflow with its append-only version chain.

    Serialises with camelCase keys (``createdAt``, ``savedAt``...) so the
    exported record matches what the editor front end reads.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    workflow: Workflow
    created_at: str
    updated_at: str
    versions: list[TemplateVersion] = Field(default_factory=list)

    def find_version(self, version_id: str) -> TemplateVersion | None:
        for version in self.versions:
            if version.id == version_id:
                return version
        return None

    @property
    def next_version_number(self) -> int:
        return len(self.versions) + 1
