"""
Text engine interface consumed by the runtime.
"""

from abc import abstractmethod
from typing import Callable, List

from ..core.config import GenerationConfig
from ..core.errors import IncompatibleEngineStateError
from ..vector.embeddings import IEmbeddingProvider
from .state import EngineState

# Receives each generated chunk; returning False stops generation.
StreamCallback = Callable[[str], bool]


class ITextEngine(IEmbeddingProvider):
    """Language model backend: generation, embeddings and checkpointable state."""

    engine_id: str = "abstract"

    @abstractmethod
    def embedding_dim(self) -> int:
        pass

    @abstractmethod
    def context_size(self) -> int:
        pass

    @abstractmethod
    def context_used(self) -> int:
        pass

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        """Embedding for *text*, used for memory writes and recall."""
        pass

    @abstractmethod
    def generate(self, prompt: str, config: GenerationConfig) -> str:
        pass

    @abstractmethod
    def generate_streaming(self, prompt: str, config: GenerationConfig,
                           callback: StreamCallback) -> str:
        pass

    @abstractmethod
    def get_state(self) -> EngineState:
        pass

    @abstractmethod
    def set_state(self, state: EngineState) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear context / KV cache."""
        pass

    def check_state(self, state: EngineState) -> None:
        """Raise IncompatibleEngineStateError if *state* belongs to another engine."""
        if not state.is_compatible_with(self.engine_id):
            raise IncompatibleEngineStateError(self.engine_id, state.engine_id)

    # IEmbeddingProvider
    def embed_text(self, text: str) -> List[float]:
        return self.embed(text)

    def get_dimension(self) -> int:
        return self.embedding_dim()
