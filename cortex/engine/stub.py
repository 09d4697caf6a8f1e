"""
Deterministic stand-in engine for tests and model-free runs.
"""

import struct
from typing import List

from ..core.config import GenerationConfig
from ..core.errors import SerializationError
from ..vector.embeddings import bag_of_words_embedding
from .base import ITextEngine, StreamCallback
from .state import EngineState


class StubEngine(ITextEngine):
    """Echo-style engine with bag-of-words embeddings.

    Responses are canned, and the only state is a running token estimate,
    which round-trips through get_state()/set_state().
    """

    engine_id = "stub"

    def __init__(self, embedding_dim: int = 4096, context_size: int = 8192,
                 response_prefix: str = ""):
        self._embedding_dim = embedding_dim
        self._context_size = context_size
        self._context_used = 0
        self.response_prefix = response_prefix

    def embedding_dim(self) -> int:
        return self._embedding_dim

    def context_size(self) -> int:
        return self._context_size

    def context_used(self) -> int:
        return self._context_used

    def embed(self, text: str) -> List[float]:
        return bag_of_words_embedding(text, self._embedding_dim).tolist()

    def generate(self, prompt: str, config: GenerationConfig) -> str:
        return self.generate_streaming(prompt, config, lambda _chunk: True)

    def generate_streaming(self, prompt: str, config: GenerationConfig,
                           callback: StreamCallback) -> str:
        response = (
            f'{self.response_prefix}[Stub response for: "{prompt[:30]}", '
            f'temp={config.temperature}, max={config.max_tokens}]'
        )

        # Chunk on spaces, keeping the separator with each word
        words = response.split(" ")
        for i, word in enumerate(words):
            chunk = word + (" " if i < len(words) - 1 else "")
            if not callback(chunk):
                break

        self._context_used += len(prompt) // 4 + len(response) // 4
        return response

    def get_state(self) -> EngineState:
        return EngineState(
            data=struct.pack("<Q", self._context_used),
            n_tokens=self._context_used,
            engine_id=self.engine_id,
        )

    def set_state(self, state: EngineState) -> None:
        self.check_state(state)
        if state.data and len(state.data) != 8:
            raise SerializationError(f"Stub engine state must be 8 bytes, got {len(state.data)}")
        self._context_used = state.n_tokens

    def clear(self) -> None:
        self._context_used = 0
