"""
Domain errors raised by the transcript store and query engine.
"""


class TranscriptSearchError(Exception):
    """Base class for all domain errors."""
    pass


class NotFoundError(TranscriptSearchError):
    """Raised when a requested transcript or line does not exist."""

    def __init__(self, resource_id: str, kind: str = "transcript"):
        self.resource_id = resource_id
        self.kind = kind
        super().__init__(f"{kind} with id '{resource_id}' not found")


class StoreFailure(TranscriptSearchError):
    """Raised when the underlying store fails or a transaction cannot commit."""
    pass


class OperationCancelled(StoreFailure):
    """Raised when the caller's deadline elapsed or it cancelled the operation."""
    pass


class PatternCompileFailure(TranscriptSearchError):
    """Raised when a search phrase cannot be compiled into a matcher."""

    def __init__(self, phrase: str, reason: str):
        self.phrase = phrase
        super().__init__(f"failed to compile matcher for '{phrase}': {reason}")
