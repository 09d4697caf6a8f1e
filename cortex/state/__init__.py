"""
Checkpointing and branching of runtime state.
"""

from .record import RuntimeStateRecord
from .store import StateStore
from .checkpoint import Branch, Checkpoint, CheckpointManager

__all__ = [
    'RuntimeStateRecord',
    'StateStore',
    'Branch',
    'Checkpoint',
    'CheckpointManager',
]
