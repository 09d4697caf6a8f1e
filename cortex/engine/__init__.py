"""
Inference engine boundary.
"""

from .state import EngineState
from .base import ITextEngine
from .stub import StubEngine

__all__ = [
    'EngineState',
    'ITextEngine',
    'StubEngine',
]
