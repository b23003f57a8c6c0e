"""Error taxonomy for workflow editing, persistence and generation.

Unknown template, version or step ids are not errors: lookups and edits
that name an absent id return ``None`` (or ``False``) and leave state alone.
"""


class OrchestratorError(Exception):
    """Base class for all domain errors."""


class StructuralViolation(OrchestratorError):
    """An edit would leave the step graph with duplicate ids, dangling
    references, a self reference or a dependency cycle.

    Raised before any state is touched.
    """


class MalformedImport(OrchestratorError):
    """Serialized template data failed shape or graph validation."""


class UpstreamGenerationFailure(OrchestratorError):
    """The external workflow generator failed or returned unusable content."""
