"""
Persistent sessions with automatic state saving.

A session lives in ``<sessions_dir>/<session_id>/`` and holds:

    session.state   full RuntimeStateRecord (messages, memory, engine state)
    memory.bin      memory snapshot on its own, for tooling
"""

import shutil
from pathlib import Path
from typing import List, Optional, Union

from .core.config import CortexConfig, GenerationConfig
from .core.errors import CortexError
from .core.messages import Message
from .engine.base import ITextEngine, StreamCallback
from .runtime import CortexRuntime
from .state.record import RuntimeStateRecord
from .util.logging import logger

STATE_FILE = "session.state"
MEMORY_FILE = "memory.bin"


class Session:
    """A runtime bound to a session directory, restored on construction."""

    def __init__(self, session_id: str, sessions_dir: Union[str, Path],
                 engine: Optional[ITextEngine] = None, config: Optional[CortexConfig] = None,
                 auto_save: bool = True):
        self.session_id = session_id
        self.session_dir = Path(sessions_dir) / session_id
        self.auto_save = auto_save
        self.session_dir.mkdir(parents=True, exist_ok=True)

        if engine is not None:
            self._runtime = CortexRuntime.for_engine(engine, config)
        else:
            self._runtime = CortexRuntime(config=config)

        self.restored = self._restore()

    @property
    def state_path(self) -> Path:
        return self.session_dir / STATE_FILE

    @property
    def memory_path(self) -> Path:
        return self.session_dir / MEMORY_FILE

    def _restore(self) -> bool:
        if not self.state_path.exists():
            return False
        try:
            self._runtime.apply_state(RuntimeStateRecord.load(self.state_path))
        except CortexError as exc:
            logger.log_persistence("session.restore", self.state_path, {"error": str(exc)}, status="failed")
            return False
        logger.log_persistence("session.restore", self.state_path, {"session_id": self.session_id})
        return True

    def without_auto_save(self) -> "Session":
        self.auto_save = False
        return self

    @property
    def id(self) -> str:
        return self.session_id

    @property
    def runtime(self) -> CortexRuntime:
        return self._runtime

    def messages(self) -> List[Message]:
        return self._runtime.messages()

    def chat(self, message: str, config: Optional[GenerationConfig] = None) -> str:
        response = self._runtime.chat([Message.user(message)], config)
        self._autosave()
        return response

    def chat_streaming(self, message: str, callback: StreamCallback,
                       config: Optional[GenerationConfig] = None) -> str:
        response = self._runtime.chat_streaming([Message.user(message)], callback, config)
        self._autosave()
        return response

    def set_system(self, message: str) -> None:
        """Reset the conversation to a single system message."""
        self._runtime.clear_messages()
        self._runtime.add_messages([Message.system(message)])
        self._autosave()

    def remember(self, key: str, value: str) -> None:
        self._runtime.remember(key, value)
        self._autosave()

    def recall(self, query: str, k: Optional[int] = None) -> List[str]:
        return self._runtime.recall(query, k)

    def save(self) -> None:
        """Write session.state and memory.bin."""
        self._runtime.snapshot().save(self.state_path)
        self._runtime.memory.persist(self.memory_path)

    def clear(self) -> None:
        """Drop conversation, memory and the session's files."""
        self._runtime.clear_messages()
        self._runtime.memory.clear()
        for path in (self.state_path, self.memory_path):
            path.unlink(missing_ok=True)

    def _autosave(self) -> None:
        if self.auto_save:
            self.save()


def list_sessions(sessions_dir: Union[str, Path]) -> List[str]:
    """Session ids found under *sessions_dir*."""
    base = Path(sessions_dir)
    if not base.exists():
        return []
    return sorted(p.name for p in base.iterdir() if p.is_dir())


def delete_session(sessions_dir: Union[str, Path], session_id: str) -> bool:
    """Remove a session directory. Returns whether it existed."""
    session_dir = Path(sessions_dir) / session_id
    if not session_dir.exists():
        return False
    shutil.rmtree(session_dir)
    return True
