"""Data model for a workflow graph: metadata plus the ordered step list."""

from pydantic import AliasChoices, BaseModel, Field

from orchestrator.models.step import Step
from orchestrator.utils.identifiers import generate_instance_id


class WorkflowMetadata(BaseModel):
    """descriptive header of a workflow."""

    name: str = Field(
        default="Untitled Workflow",
        validation_alias=AliasChoices("name", "workflow_name"),
    )
    instance_id: str = Field(default_factory=generate_instance_id)
    version: str = "v1.0.0"
    is_template: bool = False


class Workflow(BaseModel):
    """the full step graph; step order is significant."""

    metadata: WorkflowMetadata = Field(
        default_factory=WorkflowMetadata,
        validation_alias=AliasChoices("metadata", "workflow_metadata"),
    )
    steps: list[Step] = Field(default_factory=list)

    def step_ids(self) -> list[int]:
        return [step.step_id for step in self.steps]

    def get_step(self, step_id: int) -> Step | None:
        for step in self.steps:
            if step.step_id == step_id:
                return step
        return None
