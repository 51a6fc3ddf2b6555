"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.key_value_store import IKeyValueStore
from src.core.interfaces.llm import (
    HealthStatus,
    ILLMProvider,
    LLMProvider,
    LLMResponse,
)

__all__ = [
    # LLM interfaces
    "ILLMProvider",
    "LLMProvider",
    "LLMResponse",
    "HealthStatus",
    # Storage interfaces
    "IKeyValueStore",
]
