"""Learn user preferences from the edits made to generated workflows.

The summary is fed back into the generator's system prompt.
"""

import logging

from pydantic import TypeAdapter

from orchestrator.models.history import LearnedPreference
from orchestrator.models.workflow import Workflow
from orchestrator.storage.ports import StoragePort
from orchestrator.utils.identifiers import generate_record_id, utc_timestamp

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "learned_preferences"
MAX_PREFERENCES = 50

_preferences_adapter = TypeAdapter(list[LearnedPreference])


def _bump(counts: dict[str, int], key: str) -> None:
    counts[key] = counts.get(key, 0) + 1


def _top(totals: dict[str, int]) -> str | None:
    if not totals:
        return None
    # first key wins ties
    return max(totals.items(), key=lambda item: item[1])[0]


def compare_workflows(prompt: str, original: Workflow, edited: Workflow) -> LearnedPreference:
    """Count what the edited workflow chose, step by step against the original.

    Only positions present in both workflows are compared; agent types
    are counted when they changed, timing and input kinds always.
    """
    agent_changes: dict[str, int] = {}
    timing: dict[str, int] = {}
    inputs: dict[str, int] = {}
    for original_step, edited_step in zip(original.steps, edited.steps):
        if edited_step.agent_type != original_step.agent_type:
            _bump(agent_changes, edited_step.agent_type)
        _bump(timing, edited_step.timing_logic.kind)
        _bump(inputs, edited_step.input_config.kind)
    return LearnedPreference(
        id=generate_record_id("pref"),
        original_prompt=prompt,
        agent_type_changes=agent_changes,
        timing_preferences=timing,
        input_type_preferences=inputs,
        saved_at=utc_timestamp(),
    )


class PreferenceStore:
    """Keeps the most recent learned preferences, newest first."""

    def __init__(self, storage: StoragePort, key: str = PREFERENCES_KEY) -> None:
        self._storage = storage
        self._key = key

    def list_preferences(self) -> list[LearnedPreference]:
        raw = self._storage.read(self._key)
        if not raw:
            return []
        return _preferences_adapter.validate_json(raw)

    def record_feedback(self, prompt: str, original: Workflow, edited: Workflow) -> LearnedPreference:
        preference = compare_workflows(prompt, original, edited)
        kept = [preference, *self.list_preferences()][:MAX_PREFERENCES]
        self._storage.write(self._key, _preferences_adapter.dump_json(kept))
        logger.debug("recorded preference %s", preference.id)
        return preference

    def build_learning_context(self) -> str:
        """One line per category naming the user's most frequent choice."""
        preferences = self.list_preferences()
        if not preferences:
            return ""

        agent_totals: dict[str, int] = {}
        timing_totals: dict[str, int] = {}
        input_totals: dict[str, int] = {}
        for pref in preferences:
            for totals, counts in (
                (agent_totals, pref.agent_type_changes),
                (timing_totals, pref.timing_preferences),
                (input_totals, pref.input_type_preferences),
            ):
                for key, value in counts.items():
                    totals[key] = totals.get(key, 0) + value

        lines = []
        top_agent = _top(agent_totals)
        if top_agent:
            lines.append(f'- User frequently prefers "{top_agent}" agent type.')
        top_timing = _top(timing_totals)
        if top_timing:
            lines.append(f'- User prefers "{top_timing}" timing logic.')
        top_input = _top(input_totals)
        if top_input:
            lines.append(f'- User prefers "{top_input}" input type.')
        return "\n".join(lines)
