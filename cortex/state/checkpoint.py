"""
Checkpoint handles, the checkpoint index and branches.
"""

import uuid
from dataclasses import dataclass
from typing import List, Optional

from ..core.errors import BranchConsumedError
from .record import RuntimeStateRecord


@dataclass(frozen=True)
class Checkpoint:
    """Lightweight reference to a saved state. Carries no payload."""

    id: str
    name: Optional[str]
    created_at: float

    @classmethod
    def from_state(cls, state: RuntimeStateRecord) -> "Checkpoint":
        return cls(id=state.id, name=state.name, created_at=state.created_at)


class CheckpointManager:
    """Ordered index of checkpoint handles for cheap listing.

    Retention is enforced independently of StateStore; the runtime records
    into both on every checkpoint so the two stay aligned.
    """

    def __init__(self, max_checkpoints: int = 100):
        self.max_checkpoints = max_checkpoints
        self._checkpoints: List[Checkpoint] = []

    def record(self, checkpoint: Checkpoint) -> None:
        self._checkpoints.append(checkpoint)
        while len(self._checkpoints) > self.max_checkpoints:
            self._checkpoints.pop(0)

    def latest(self) -> Optional[Checkpoint]:
        return self._checkpoints[-1] if self._checkpoints else None

    def get(self, checkpoint_id: str) -> Optional[Checkpoint]:
        for checkpoint in self._checkpoints:
            if checkpoint.id == checkpoint_id:
                return checkpoint
        return None

    def find_by_name(self, name: str) -> Optional[Checkpoint]:
        """Most recent checkpoint carrying *name*."""
        for checkpoint in reversed(self._checkpoints):
            if checkpoint.name == name:
                return checkpoint
        return None

    def list(self) -> List[Checkpoint]:
        return list(self._checkpoints)

    def remove(self, checkpoint_id: str) -> bool:
        before = len(self._checkpoints)
        self._checkpoints = [c for c in self._checkpoints if c.id != checkpoint_id]
        return len(self._checkpoints) != before

    def clear(self) -> None:
        self._checkpoints.clear()

    def __len__(self) -> int:
        return len(self._checkpoints)


class Branch:
    """Independent copy of a checkpoint's state.

    Forking copies the state; nothing done to the branch reaches the parent
    record, and vice versa.
    """

    def __init__(self, parent_id: str, state: RuntimeStateRecord):
        self.id = str(uuid.uuid4())
        self.parent_id = parent_id
        self._state: Optional[RuntimeStateRecord] = state.copy()

    def state(self) -> RuntimeStateRecord:
        return self._owned()

    def state_mut(self) -> RuntimeStateRecord:
        """The branch's own state, for in-place evolution."""
        return self._owned()

    def into_state(self) -> RuntimeStateRecord:
        """Hand the state over to the caller; the branch is unusable afterwards."""
        state = self._owned()
        self._state = None
        return state

    @property
    def consumed(self) -> bool:
        return self._state is None

    def _owned(self) -> RuntimeStateRecord:
        if self._state is None:
            raise BranchConsumedError(f"Branch {self.id} was already consumed")
        return self._state
