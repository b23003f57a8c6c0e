"""Step model: one node of a workflow graph.

Timing and input configuration are tagged variants so that fields which
only make sense for one mode (a trigger condition, a script body, the ids
of prior steps) cannot be set on another.
"""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class ExecutionStatus(str, Enum):
    """Display-only run state of a step."""

    pending = "pending"
    running = "running"
    done = "done"
    failed = "failed"


class RecurringPeriod(str, Enum):
    hourly = "hourly"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


# --- timing variants ---


class ManualTiming(BaseModel):
    kind: Literal["manual"] = "manual"


class AutoTiming(BaseModel):
    kind: Literal["auto"] = "auto"


class TriggerTiming(BaseModel):
    kind: Literal["trigger"] = "trigger"
    condition: str = ""


class RecurringTiming(BaseModel):
    kind: Literal["recurring"] = "recurring"
    period: RecurringPeriod = RecurringPeriod.daily
    time: str | None = None  # "HH:MM"
    stop_condition: str | None = None


TimingLogic = Annotated[
    ManualTiming | AutoTiming | TriggerTiming | RecurringTiming,
    Field(discriminator="kind"),
]


# --- input variants ---


class _InputBase(BaseModel):
    source: str | None = None  # e.g. "PM_Input", "Agent_ID_1_JSON_Output"
    data_format: str | None = None  # e.g. "JSON", "CSV", "Raw_Text"


class PromptInput(_InputBase):
    kind: Literal["prompt"] = "prompt"
    text: str = ""


class ScriptInput(_InputBase):
    kind: Literal["script"] = "script"
    content: str = ""


class PriorOutputInput(_InputBase):
    kind: Literal["prior_output"] = "prior_output"
    prior_step_ids: list[int] = Field(default_factory=list)

    @field_validator("prior_step_ids")
    @classmethod
    def normalize_ids(cls, value: list[int]) -> list[int]:
        return sorted(set(value))


InputConfig = Annotated[
    PromptInput | ScriptInput | PriorOutputInput,
    Field(discriminator="kind"),
]


def _timing_from_legacy(value: str | None, data: dict) -> dict:
    """Convert a plain timing string plus flat side fields into a variant."""
    label = (value or "").strip().lower()
    if label.startswith("trigger"):
        return {"kind": "trigger", "condition": data.get("trigger_condition") or ""}
    if label.startswith("recurring"):
        return {
            "kind": "recurring",
            "period": data.get("recurring_period") or RecurringPeriod.daily.value,
            "time": data.get("recurring_time") or None,
            "stop_condition": data.get("recurring_stop_condition") or None,
        }
    if label.startswith("auto"):
        return {"kind": "auto"}
    return {"kind": "manual"}


def _input_from_legacy(config: dict) -> dict:
    """Convert an ``input_type``-keyed input config into a variant."""
    base = {
        "source": config.get("source"),
        "data_format": config.get("data_format") or config.get("type"),
    }
    input_type = config.get("input_type") or "prompt"
    if input_type == "script":
        return {
            **base,
            "kind": "script",
            "content": config.get("script_content") or config.get("content") or "",
        }
    if input_type == "prior_output":
        return {
            **base,
            "kind": "prior_output",
            "prior_step_ids": config.get("prior_step_ids") or [],
        }
    return {
        **base,
        "kind": "prompt",
        "text": config.get("prompt_text") or config.get("text") or "",
    }


class Step(BaseModel):
    """A single step of a workflow, handled by one automation-agent category."""

    step_id: int = Field(ge=1)
    agent_type: str
    agent_ids: list[str] = Field(default_factory=list)  # refs into the agent catalog
    action_description: str = ""
    timing_logic: TimingLogic = Field(default_factory=ManualTiming)
    depends_on: list[int] = Field(default_factory=list)
    parallel_group: str | None = None
    input_config: InputConfig = Field(default_factory=PromptInput)
    output_storage: str = ""
    execution_status: ExecutionStatus | None = None
    inline_comment: str | None = None

    @model_validator(mode="before")
    @classmethod
    def upgrade_legacy_fields(cls, data: Any) -> Any:
        """Accept the flat step shape produced by the generator."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        timing = data.get("timing_logic")
        if timing is None or isinstance(timing, str):
            data["timing_logic"] = _timing_from_legacy(timing, data)
        config = data.get("input_config")
        if isinstance(config, dict) and "kind" not in config:
            data["input_config"] = _input_from_legacy(config)
        if data.get("depends_on") is None:
            data.pop("depends_on", None)
        return data

    @field_validator("depends_on")
    @classmethod
    def normalize_depends_on(cls, value: list[int]) -> list[int]:
        return sorted(set(value))

    @field_validator("agent_ids")
    @classmethod
    def normalize_agent_ids(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("parallel_group")
    @classmethod
    def blank_group_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    @property
    def prior_step_ids(self) -> list[int]:
        if isinstance(self.input_config, PriorOutputInput):
            return self.input_config.prior_step_ids
        return []

    def referenced_ids(self) -> set[int]:
        """All step ids this step points at (dependencies and prior outputs)."""
        return set(self.depends_on) | set(self.prior_step_ids)
