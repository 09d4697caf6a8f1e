"""
Exception hierarchy for memory and checkpoint operations.
"""


class CortexError(Exception):
    """Base exception for all runtime errors."""
    pass


class DimensionMismatchError(CortexError):
    """Embedding length does not match the configured dimension."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Embedding dimension mismatch: expected {expected}, got {actual}")


class SerializationError(CortexError):
    """Persisted data is malformed, truncated or in a foreign format."""
    pass


class InvalidCheckpointError(CortexError):
    """Requested checkpoint is absent from memory and disk."""

    def __init__(self, checkpoint_id: str):
        self.checkpoint_id = checkpoint_id
        super().__init__(f"Checkpoint not found: {checkpoint_id}")


class StorageError(CortexError):
    """Underlying file-system failure."""

    def __init__(self, message: str, path=None):
        self.path = path
        super().__init__(message)


class IncompatibleEngineStateError(CortexError):
    """Engine state blob was produced by a different engine."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Engine state tagged '{actual}' cannot be loaded by engine '{expected}'")


class BranchConsumedError(CortexError):
    """Branch state was already handed over with into_state()."""
    pass
