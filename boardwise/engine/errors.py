"""
Error taxonomy for the engine and its collaborators.
Validation errors subclass ValueError so callers can catch them uniformly.
"""


class InvalidFormat(ValueError):
    """Board document is malformed or missing id/settings/tiles."""


class IllegalAction(ValueError):
    """Action is not allowed in the current game status (or fails a guard)."""


class UnsupportedLanguage(ValueError):
    """Translation requested for a language code with no mapping."""


class AIServiceError(RuntimeError):
    """The quiz/translation service failed (unreachable, error status, timeout)."""


class EmptyGenerationResult(AIServiceError):
    """Quiz generation or translation service returned nothing usable."""


class PersistenceUnavailable(RuntimeError):
    """Play-state storage could not be read or written."""
