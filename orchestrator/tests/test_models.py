"""Tests for model validation, legacy upgrades and serialization."""

import json

import pytest
from pydantic import ValidationError

from orchestrator.models.step import (
    AutoTiming,
    ManualTiming,
    PriorOutputInput,
    PromptInput,
    RecurringPeriod,
    RecurringTiming,
    ScriptInput,
    Step,
    TriggerTiming,
)
from orchestrator.models.template import Template, TemplateVersion
from orchestrator.models.workflow import Workflow
from orchestrator.utils.identifiers import (
    generate_instance_id,
    generate_template_id,
    utc_timestamp,
)


class TestStepDefaults:
    """Test the defaults and normalization of a step."""

    def test_minimal_step(self):
        step = Step(step_id=1, agent_type="Content")
        assert isinstance(step.timing_logic, ManualTiming)
        assert isinstance(step.input_config, PromptInput)
        assert step.depends_on == []
        assert step.execution_status is None

    def test_depends_on_is_sorted_and_unique(self):
        step = Step(step_id=4, agent_type="Content", depends_on=[3, 1, 3])
        assert step.depends_on == [1, 3]

    def test_blank_parallel_group_is_none(self):
        step = Step(step_id=1, agent_type="Content", parallel_group="  ")
        assert step.parallel_group is None

    def test_agent_ids_deduplicated_in_order(self):
        step = Step(step_id=1, agent_type="CRM", agent_ids=["b", "a", "b"])
        assert step.agent_ids == ["b", "a"]

    def test_step_id_must_be_positive(self):
        with pytest.raises(ValidationError):
            Step(step_id=0, agent_type="Content")

    def test_referenced_ids_include_prior_outputs(self):
        step = Step(
            step_id=3,
            agent_type="Content",
            depends_on=[1],
            input_config=PriorOutputInput(prior_step_ids=[2]),
        )
        assert step.referenced_ids() == {1, 2}
        assert step.prior_step_ids == [2]


class TestLegacyStepShape:
    """Test upgrading the flat step shape into tagged variants."""

    def test_plain_timing_strings(self):
        assert isinstance(
            Step.model_validate({"step_id": 1, "agent_type": "x", "timing_logic": "Auto"}).timing_logic,
            AutoTiming,
        )
        assert isinstance(
            Step.model_validate({"step_id": 1, "agent_type": "x", "timing_logic": "Manual"}).timing_logic,
            ManualTiming,
        )

    def test_unknown_timing_falls_back_to_manual(self):
        step = Step.model_validate({"step_id": 1, "agent_type": "x", "timing_logic": "Sometimes"})
        assert isinstance(step.timing_logic, ManualTiming)

    def test_trigger_with_condition(self):
        step = Step.model_validate(
            {
                "step_id": 1,
                "agent_type": "x",
                "timing_logic": "Trigger",
                "trigger_condition": "new lead in CRM",
            }
        )
        assert step.timing_logic == TriggerTiming(condition="new lead in CRM")

    def test_recurring_with_schedule(self):
        step = Step.model_validate(
            {
                "step_id": 1,
                "agent_type": "x",
                "timing_logic": "Recurring",
                "recurring_period": "weekly",
                "recurring_time": "09:00",
            }
        )
        assert isinstance(step.timing_logic, RecurringTiming)
        assert step.timing_logic.period == RecurringPeriod.weekly
        assert step.timing_logic.time == "09:00"
        assert step.timing_logic.stop_condition is None

    def test_input_type_prior_output(self):
        step = Step.model_validate(
            {
                "step_id": 3,
                "agent_type": "x",
                "input_config": {
                    "source": "Agent_ID_1_JSON_Output",
                    "type": "JSON",
                    "input_type": "prior_output",
                    "prior_step_ids": [2, 1],
                },
            }
        )
        assert step.input_config == PriorOutputInput(
            source="Agent_ID_1_JSON_Output",
            data_format="JSON",
            prior_step_ids=[1, 2],
        )

    def test_input_type_script(self):
        step = Step.model_validate(
            {
                "step_id": 1,
                "agent_type": "x",
                "input_config": {"input_type": "script", "script_content": "print(1)"},
            }
        )
        assert step.input_config == ScriptInput(content="print(1)")

    def test_input_without_type_is_prompt(self):
        step = Step.model_validate(
            {
                "step_id": 1,
                "agent_type": "x",
                "input_config": {"source": "PM_Input", "type": "Raw_Text"},
            }
        )
        assert isinstance(step.input_config, PromptInput)
        assert step.input_config.source == "PM_Input"

    def test_null_depends_on(self):
        step = Step.model_validate({"step_id": 1, "agent_type": "x", "depends_on": None})
        assert step.depends_on == []

    def test_tagged_shape_round_trip(self):
        step = Step(
            step_id=2,
            agent_type="Scheduler",
            timing_logic=RecurringTiming(period=RecurringPeriod.daily, time="08:30"),
            input_config=PriorOutputInput(prior_step_ids=[1]),
        )
        restored = Step.model_validate_json(step.model_dump_json())
        assert restored == step


class TestWorkflow:
    """Test workflow metadata aliases and helpers."""

    def test_generator_metadata_keys(self):
        workflow = Workflow.model_validate(
            {
                "workflow_metadata": {"workflow_name": "Lead Gen", "version": "v2.0.0"},
                "steps": [{"step_id": 1, "agent_type": "Scraper"}],
            }
        )
        assert workflow.metadata.name == "Lead Gen"
        assert workflow.metadata.version == "v2.0.0"
        assert workflow.step_ids() == [1]

    def test_get_step(self):
        workflow = Workflow(steps=[Step(step_id=1, agent_type="CRM")])
        assert workflow.get_step(1).agent_type == "CRM"
        assert workflow.get_step(2) is None

    def test_instance_id_format(self):
        instance_id = generate_instance_id()
        assert instance_id.startswith("instance_")
        assert len(instance_id) == len("instance_") + 12


class TestTemplateSerialization:
    """Test camelCase template records."""

    def _template(self) -> Template:
        now = utc_timestamp()
        return Template(
            id=generate_template_id(),
            name="Outreach",
            workflow=Workflow(steps=[Step(step_id=1, agent_type="Outreach")]),
            created_at=now,
            updated_at=now,
        )

    def test_dump_uses_camel_case(self):
        data = json.loads(self._template().model_dump_json(by_alias=True))
        assert "createdAt" in data
        assert "updatedAt" in data
        assert data["versions"] == []

    def test_accepts_camel_and_snake_keys(self):
        template = self._template()
        from_camel = Template.model_validate(template.model_dump(by_alias=True))
        from_snake = Template.model_validate(template.model_dump())
        assert from_camel == template
        assert from_snake == template

    def test_version_is_immutable(self):
        version = TemplateVersion(
            id="v",
            version=1,
            workflow=Workflow(),
            saved_at=utc_timestamp(),
        )
        with pytest.raises(ValidationError):
            version.change_note = "edited"

    def test_next_version_number(self):
        template = self._template()
        assert template.next_version_number == 1
        assert template.find_version("missing") is None
