"""LLM infrastructure implementations."""

from src.core.interfaces import ILLMProvider
from src.infrastructure.llm.base import BaseLLMProvider, CircuitBreakerState
from src.infrastructure.llm.factory import (
    check_llm_health,
    get_llm_provider,
    reset_providers,
)
from src.infrastructure.llm.gemini import GeminiProvider, get_gemini_provider
from src.infrastructure.llm.ollama import OllamaProvider, get_ollama_provider

__all__ = [
    # Interface
    "ILLMProvider",
    # Base
    "BaseLLMProvider",
    "CircuitBreakerState",
    # Gemini
    "GeminiProvider",
    "get_gemini_provider",
    # Ollama
    "OllamaProvider",
    "get_ollama_provider",
    # Factory
    "get_llm_provider",
    "check_llm_health",
    "reset_providers",
]
