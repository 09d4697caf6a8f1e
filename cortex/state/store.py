"""
Checkpoint storage with bounded retention and optional on-disk mirroring.
"""

from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.config import StateConfig
from ..core.errors import InvalidCheckpointError, SerializationError
from ..util.logging import logger
from .record import CHECKPOINT_EXTENSION, RuntimeStateRecord


class StateStore:
    """Registry of RuntimeStateRecords keyed by id.

    In-memory bookkeeping is authoritative; the durable directory (if any)
    mirrors it. When the count exceeds ``max_checkpoints`` the oldest saved
    record is evicted from memory and its file removed best-effort.
    """

    def __init__(self, persist_dir: Optional[Union[str, Path]] = None, max_checkpoints: int = 100):
        self.persist_dir = Path(persist_dir) if persist_dir is not None else None
        self.max_checkpoints = max_checkpoints
        self._checkpoints: Dict[str, RuntimeStateRecord] = {}
        self._order: List[str] = []

    @classmethod
    def from_config(cls, config: StateConfig) -> "StateStore":
        return cls(config.directory, config.max_checkpoints)

    def path_for(self, checkpoint_id: str) -> Optional[Path]:
        if self.persist_dir is None:
            return None
        return self.persist_dir / f"{checkpoint_id}{CHECKPOINT_EXTENSION}"

    def save(self, state: RuntimeStateRecord) -> str:
        """Store a copy of *state* and return its id.

        With a durable directory the file is written first; a write failure
        propagates and leaves the store unchanged.
        """
        checkpoint_id = state.id

        path = self.path_for(checkpoint_id)
        if path is not None:
            state.save(path)

        if checkpoint_id in self._checkpoints:
            self._order.remove(checkpoint_id)
        self._checkpoints[checkpoint_id] = state.copy()
        self._order.append(checkpoint_id)
        logger.log_checkpoint_operation("save", checkpoint_id, {
            "name": state.name,
            "durable": path is not None,
        })

        while len(self._checkpoints) > self.max_checkpoints and self._order:
            oldest_id = self._order.pop(0)
            self._checkpoints.pop(oldest_id, None)
            self._remove_file(oldest_id)
            logger.log_eviction("checkpoint", oldest_id, self.max_checkpoints)

        return checkpoint_id

    def load(self, checkpoint_id: str) -> RuntimeStateRecord:
        """Return a copy of the record, checking memory first, then disk."""
        state = self._checkpoints.get(checkpoint_id)
        if state is not None:
            return state.copy()

        path = self.path_for(checkpoint_id)
        if path is not None and path.exists():
            logger.log_checkpoint_operation("load", checkpoint_id, {"source": "disk"})
            record = RuntimeStateRecord.load(path)
            if record.id != checkpoint_id:
                raise SerializationError(
                    f"Checkpoint file {path} holds record {record.id}, expected {checkpoint_id}"
                )
            return record

        raise InvalidCheckpointError(checkpoint_id)

    def delete(self, checkpoint_id: str) -> bool:
        """Remove from memory and disk. Returns whether an in-memory entry existed."""
        removed = self._checkpoints.pop(checkpoint_id, None) is not None
        self._order = [i for i in self._order if i != checkpoint_id]
        self._remove_file(checkpoint_id)
        if removed:
            logger.log_checkpoint_operation("delete", checkpoint_id)
        return removed

    def list(self) -> List[str]:
        """Checkpoint ids, oldest first."""
        return list(self._order)

    def list_persisted(self) -> List[str]:
        """Checkpoint ids with a file in the durable directory."""
        if self.persist_dir is None or not self.persist_dir.is_dir():
            return []
        return sorted(p.stem for p in self.persist_dir.glob(f"*{CHECKPOINT_EXTENSION}"))

    def is_empty(self) -> bool:
        return not self._checkpoints

    def __len__(self) -> int:
        return len(self._checkpoints)

    def __contains__(self, checkpoint_id: str) -> bool:
        return checkpoint_id in self._checkpoints

    def _remove_file(self, checkpoint_id: str) -> None:
        # Best-effort: in-memory bookkeeping is already correct
        path = self.path_for(checkpoint_id)
        if path is None:
            return
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.log_persistence("checkpoint.cleanup", path, {"error": str(exc)}, status="failed")
