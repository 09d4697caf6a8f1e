"""
Opaque inference-engine state carried through checkpoints.
"""

from dataclasses import dataclass

NO_ENGINE = "none"


@dataclass(frozen=True)
class EngineState:
    """Serialized engine context (e.g. a KV cache) tagged with its engine id.

    The runtime never interprets ``data``; it only checks the tag.
    """

    data: bytes = b""
    n_tokens: int = 0
    engine_id: str = NO_ENGINE

    @property
    def is_empty(self) -> bool:
        return self.engine_id == NO_ENGINE and not self.data

    def is_compatible_with(self, engine_id: str) -> bool:
        """Whether an engine tagged *engine_id* can accept this blob.

        Untagged state is accepted by every engine.
        """
        return self.engine_id == NO_ENGINE or self.engine_id == engine_id
