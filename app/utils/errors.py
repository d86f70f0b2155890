"""Error taxonomy for lifecycle operations."""


class PipelineError(Exception):
    """Base exception for lifecycle operations."""
    kind = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PipelineError):
    """Referenced entity does not exist."""
    kind = "not_found"


class InvalidStateError(PipelineError):
    """Entity is in a status that forbids the operation."""
    kind = "invalid_state"


class ConflictError(PipelineError):
    """Invariant violation (duplicate, overlap, dependent records)."""
    kind = "conflict"


class StorageTimeoutError(PipelineError):
    """Storage call exceeded its deadline."""
    kind = "timeout"


class InternalError(PipelineError):
    """Unexpected storage fault."""
    kind = "internal"
