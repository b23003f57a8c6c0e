"""Named workflow templates with an append-only version chain.

All templates live under one storage key as a JSON list. Each mutating
call loads the list, builds the new list and writes it back once, so a
failed call never leaves a half-written chain behind.
"""

import json
import logging
from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError

from orchestrator.errors import MalformedImport, StructuralViolation
from orchestrator.graph.validation import validate_steps
from orchestrator.models.template import Template, TemplateVersion
from orchestrator.models.workflow import Workflow
from orchestrator.storage.ports import StoragePort
from orchestrator.utils.identifiers import (
    generate_template_id,
    generate_version_id,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

TEMPLATES_KEY = "workflow_templates"

_templates_adapter = TypeAdapter(list[Template])

# fields an import never takes from the incoming record
_IMPORT_RESET_FIELDS = ("id", "createdAt", "created_at", "updatedAt", "updated_at")


def unique_name(candidate: str, taken: Iterable[str]) -> str:
    """Return *candidate*, or *candidate* suffixed with " (2)", " (3)"... if taken."""
    taken = set(taken)
    if candidate not in taken:
        return candidate
    suffix = 2
    while f"{candidate} ({suffix})" in taken:
        suffix += 1
    return f"{candidate} ({suffix})"


def parse_template_record(text: str) -> Template:
    """Parse an exported template record.

    The record gets a fresh id and update time; its creation time and
    version chain are kept, missing tags and versions default to empty.
    Raises MalformedImport on any shape or graph error.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedImport(f"not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise MalformedImport("template record must be a JSON object")
    name = parsed.get("name")
    if not isinstance(name, str) or not name.strip() or not parsed.get("workflow"):
        raise MalformedImport("template record needs 'name' and 'workflow'")

    now = utc_timestamp()
    record = {k: v for k, v in parsed.items() if k not in _IMPORT_RESET_FIELDS}
    record["id"] = generate_template_id()
    record["createdAt"] = parsed.get("createdAt") or parsed.get("created_at") or now
    record["updatedAt"] = now
    record["tags"] = parsed.get("tags") or []
    record["versions"] = parsed.get("versions") or []
    record.setdefault("description", "")

    try:
        template = Template.model_validate(record)
    except ValidationError as e:
        raise MalformedImport(f"invalid template record: {e}") from e

    try:
        validate_steps(template.workflow.steps)
        for version in template.versions:
            validate_steps(version.workflow.steps)
    except StructuralViolation as e:
        raise MalformedImport(f"invalid workflow graph: {e}") from e

    numbers = [version.version for version in template.versions]
    if numbers != list(range(1, len(numbers) + 1)):
        raise MalformedImport(
            f"version numbers must be 1..{len(numbers)} in order, got {numbers}"
        )
    return template.model_copy(update={"workflow": without_run_state(template.workflow)})


def without_run_state(workflow: Workflow) -> Workflow:
    """A copy of *workflow* with every step's execution status cleared."""
    return workflow.model_copy(
        update={
            "steps": [
                step.model_copy(update={"execution_status": None}, deep=True)
                for step in workflow.steps
            ]
        },
        deep=True,
    )


class TemplateStore:
    """Save, restore, clone, delete, export and import workflow templates.

    Lookups of unknown template or version ids return ``None`` (``False``
    for delete) and leave storage untouched.
    """

    def __init__(self, storage: StoragePort, key: str = TEMPLATES_KEY) -> None:
        self._storage = storage
        self._key = key

    # --- storage helpers ---

    def _load(self) -> list[Template]:
        raw = self._storage.read(self._key)
        if not raw:
            return []
        return _templates_adapter.validate_json(raw)

    def _persist(self, templates: list[Template]) -> None:
        self._storage.write(self._key, _templates_adapter.dump_json(templates, by_alias=True))

    # --- reads ---

    def list_templates(self) -> list[Template]:
        """All templates, most recently updated first."""
        return sorted(self._load(), key=lambda t: t.updated_at, reverse=True)

    def get(self, template_id: str) -> Template | None:
        for template in self._load():
            if template.id == template_id:
                return template
        return None

    def get_by_name(self, name: str) -> Template | None:
        for template in self._load():
            if template.name == name:
                return template
        return None

    # --- save / version ---

    def save(
        self,
        name: str,
        workflow: Workflow,
        description: str = "",
        tags: list[str] | None = None,
        change_note: str = "",
    ) -> Template:
        """Create a template, or push the stored graph as a version and overwrite it.

        Empty description or tags keep the stored ones.
        """
        if not name.strip():
            raise ValueError("template name must not be empty")
        validate_steps(workflow.steps)

        templates = self._load()
        now = utc_timestamp()
        index = next((i for i, t in enumerate(templates) if t.name == name), None)

        if index is None:
            template = Template(
                id=generate_template_id(),
                name=name,
                description=description,
                tags=list(tags or []),
                workflow=without_run_state(workflow),
                created_at=now,
                updated_at=now,
            )
            templates.append(template)
            logger.info("created template %s (%s)", template.id, name)
        else:
            existing = templates[index]
            version = TemplateVersion(
                id=generate_version_id(),
                version=existing.next_version_number,
                workflow=existing.workflow,
                saved_at=existing.updated_at,
                change_note=change_note,
            )
            template = existing.model_copy(
                update={
                    "workflow": without_run_state(workflow),
                    "description": description or existing.description,
                    "tags": list(tags) if tags else existing.tags,
                    "updated_at": now,
                    "versions": [*existing.versions, version],
                }
            )
            templates[index] = template
            logger.info("pushed v%d of template %s", version.version, existing.id)

        self._persist(templates)
        return template

    def restore(self, template_id: str, version_id: str) -> Template | None:
        """Make a stored version current, snapshotting the graph it replaces."""
        templates = self._load()
        index = next((i for i, t in enumerate(templates) if t.id == template_id), None)
        if index is None:
            logger.debug("restore: unknown template %s", template_id)
            return None
        template = templates[index]
        target = template.find_version(version_id)
        if target is None:
            logger.debug("restore: unknown version %s of %s", version_id, template_id)
            return None

        snapshot = TemplateVersion(
            id=generate_version_id(),
            version=template.next_version_number,
            workflow=template.workflow,
            saved_at=template.updated_at,
            change_note=f"Auto snapshot before restore to v{target.version}",
        )
        restored = template.model_copy(
            update={
                "workflow": without_run_state(target.workflow),
                "updated_at": utc_timestamp(),
                "versions": [*template.versions, snapshot],
            }
        )
        templates[index] = restored
        self._persist(templates)
        logger.info("restored template %s to v%d", template_id, target.version)
        return restored

    # --- CRUD ---

    def clone(self, template_id: str) -> Template | None:
        """Copy a template under a new id and name; history is not copied."""
        templates = self._load()
        original = next((t for t in templates if t.id == template_id), None)
        if original is None:
            return None
        now = utc_timestamp()
        cloned = Template(
            id=generate_template_id(),
            name=unique_name(f"{original.name} (Copy)", (t.name for t in templates)),
            description=original.description,
            tags=list(original.tags),
            workflow=original.workflow.model_copy(deep=True),
            created_at=now,
            updated_at=now,
            versions=[],
        )
        templates.append(cloned)
        self._persist(templates)
        logger.info("cloned template %s into %s", template_id, cloned.id)
        return cloned

    def delete(self, template_id: str) -> bool:
        """Remove a template and its whole version chain."""
        templates = self._load()
        remaining = [t for t in templates if t.id != template_id]
        if len(remaining) == len(templates):
            logger.debug("delete: unknown template %s", template_id)
            return False
        self._persist(remaining)
        logger.info("deleted template %s", template_id)
        return True

    # --- export / import ---

    def export_json(self, template_id: str) -> str | None:
        template = self.get(template_id)
        if template is None:
            return None
        return template.model_dump_json(by_alias=True, indent=2)

    def import_json(self, text: str) -> Template | None:
        """Add a template from an exported record; None if the record is malformed."""
        try:
            template = parse_template_record(text)
        except MalformedImport as e:
            logger.warning("rejected template import: %s", e)
            return None

        templates = self._load()
        name = unique_name(template.name, (t.name for t in templates))
        if name != template.name:
            template = template.model_copy(update={"name": name})
        templates.append(template)
        self._persist(templates)
        logger.info("imported template %s (%s)", template.id, template.name)
        return template
