"""Domain error taxonomy."""


class LingoQuestError(Exception):
    """Base class for all domain errors."""

    code = "error"


class ValidationError(LingoQuestError):
    """Malformed input rejected at the boundary."""

    code = "validation_error"


class NotFoundError(LingoQuestError):
    """A quest, achievement, power-up or user id is absent."""

    code = "not_found"


class PreconditionError(LingoQuestError):
    """Operation is valid in shape but not allowed in the current state."""

    code = "precondition_failed"


class ProviderUnavailable(LingoQuestError):
    """The conversation provider could not produce a result."""

    code = "provider_unavailable"
