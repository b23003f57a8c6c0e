"""Workflow generation from a business use case through an OpenAI chat model."""

import logging
import os

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from orchestrator.errors import UpstreamGenerationFailure
from orchestrator.generation.ingest import ingest_workflow
from orchestrator.models.workflow import Workflow

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"

SYSTEM_INSTRUCTION = """You are a Senior AI Solutions Architect & Workflow Orchestrator.

Goal: Architect a highly technical, realistic, and executable business workflow based on the user's Business Use Case.

Operational Protocol:
1. Realism is paramount. Use specific technical actions such as "Ingest CSV data via Pandas, clean null values, and run sentiment analysis using NLTK" instead of generic ones like "Analyze data".
2. Specific Agent Roles: assign agents that fit the task precisely.
   - Scraper: uses tools like Puppeteer/Selenium.
   - CRM: interacts with Salesforce/HubSpot schemas.
   - Content: uses LLMs for generation.
   - Analytics: uses SQL/Python/Tableau logic.
3. Data Harmony: step inputs and outputs must be technically compatible. Use realistic storage paths (e.g. `s3://bucket/data.json`, `postgres.users_table`, `redis:cache:key`).
4. Logic: PM_Input is the initial raw requirement from the user; Agent_ID_{N} refers to the output of a previous agent.
5. Parallel Steps: group steps that can run concurrently by giving them the same `parallel_group` value (e.g. "group_A"). Use `depends_on` to list the step_ids that must complete before a step starts.

Generate the JSON response strictly following the provided schema."""

USER_TEMPLATE = """Business Use Case: "{use_case}"

Generate a comprehensive, production-ready workflow of EXACTLY 8 to 12 steps following this JSON schema:

{{
  "workflow_metadata": {{
    "workflow_name": "string (professional, technical name)",
    "instance_id": "string (e.g. instance_v1.0.0)",
    "is_template": "boolean",
    "version": "string (e.g. v1.0.0)"
  }},
  "steps": [
    {{
      "step_id": "integer, 1..N in order",
      "agent_type": "string (one of: Content, Design, Scheduler, Heatmaps, Bounce, Subject Line Checker, Scraper, CRM, Outreach, Analytics)",
      "action_description": "string (detailed technical description)",
      "timing_logic": "string (Manual/Auto/Trigger/Recurring)",
      "parallel_group": "string or null",
      "depends_on": "array of step_ids this step waits for; [] for step 1, at least one earlier step_id otherwise",
      "input_config": {{
        "source": "string (e.g. PM_Input or Agent_ID_1_JSON_Output)",
        "type": "string (e.g. JSON, CSV, PNG, Raw Text)",
        "input_type": "prompt | script | prior_output"
      }},
      "output_storage": "string (realistic storage destination)"
    }}
  ]
}}"""

LEARNED_PREFERENCES_HEADER = "--- LEARNED USER PREFERENCES ---"


def _content_text(content) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return str(content or "")


class WorkflowGenerator:
    """Turns a natural-language use case into a validated Workflow.

    Either returns a complete graph that passed the structural checks or
    raises UpstreamGenerationFailure; a partial graph is never returned.
    """

    def __init__(
        self,
        llm: BaseChatModel | None = None,
        model: str | None = None,
        temperature: float = 0.2,
    ) -> None:
        self._llm = llm
        self.model = model or os.getenv("ORCHESTRATOR_MODEL", DEFAULT_MODEL)
        self.temperature = temperature

    def _get_llm(self):
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self.model,
                temperature=self.temperature,
            ).bind(response_format={"type": "json_object"})
        return self._llm

    def build_messages(self, use_case: str, learning_context: str = "") -> list[BaseMessage]:
        system_content = SYSTEM_INSTRUCTION
        if learning_context:
            system_content = f"{SYSTEM_INSTRUCTION}\n\n{LEARNED_PREFERENCES_HEADER}\n{learning_context}"
        return [
            SystemMessage(content=system_content),
            HumanMessage(content=USER_TEMPLATE.format(use_case=use_case)),
        ]

    def generate(self, use_case: str, learning_context: str = "") -> Workflow:
        if not use_case.strip():
            raise ValueError("use case must not be empty")

        messages = self.build_messages(use_case, learning_context)
        try:
            response = self._get_llm().invoke(messages)
        except Exception as e:
            logger.warning("workflow generation call failed: %s", e)
            raise UpstreamGenerationFailure(f"workflow generation failed: {e}") from e

        text = _content_text(getattr(response, "content", response))
        if not text.strip():
            raise UpstreamGenerationFailure("no response generated by the model")

        workflow = ingest_workflow(text)
        logger.info("generated workflow with %d steps", len(workflow.steps))
        return workflow
