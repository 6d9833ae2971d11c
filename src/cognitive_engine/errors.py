"""
Cognitive Engine Errors

Exception taxonomy shared by the storage layer, the engines and the
tool front end:

- ValidationError: malformed or out-of-range input, raised before any write
- NotFoundError: unknown tool name at the dispatch boundary
- StorageError: the underlying datastore failed
- DeserializationError: a stored tags blob could not be parsed
- InternalError: any other failure, reported at the dispatch boundary

Deleting zero rows is a normal outcome and never raises.
"""

from typing import Any, Dict, Optional


class CognitiveEngineError(Exception):
    """Base class for all errors surfaced to tool callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Tagged failure result returned by the front end."""
        return {
            "error": type(self).__name__,
            "message": self.message
        }


class ValidationError(CognitiveEngineError):
    """Input rejected before touching storage."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class NotFoundError(CognitiveEngineError):
    pass


class StorageError(CognitiveEngineError):
    """Datastore failure (I/O, corruption, constraint violation)."""
    pass


class DeserializationError(CognitiveEngineError):
    """A stored row is malformed and cannot be shaped for output."""
    pass


class InternalError(CognitiveEngineError):
    """An operation failed in a way the taxonomy does not name."""
    pass
