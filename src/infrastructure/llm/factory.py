"""
LLM provider factory.

Creates appropriate provider based on configuration.
"""

from typing import Any

from src.config import get_logger, get_settings
from src.core.interfaces import ILLMProvider

logger = get_logger(__name__)


def get_llm_provider(provider_type: str | None = None) -> ILLMProvider:
    """
    Get an LLM provider instance.

    Args:
        provider_type: "gemini" or "ollama" (default from settings)

    Returns:
        ILLMProvider instance
    """
    provider_type = provider_type or get_settings().llm.provider

    if provider_type == "gemini":
        from src.infrastructure.llm.gemini import get_gemini_provider

        return get_gemini_provider()

    elif provider_type == "ollama":
        from src.infrastructure.llm.ollama import get_ollama_provider

        return get_ollama_provider()

    else:
        raise ValueError(f"Unknown LLM provider: {provider_type}")


async def check_llm_health() -> dict[str, Any]:
    """
    Check health of the configured LLM provider.

    Returns:
        Dict with health status under "primary"
    """
    settings = get_settings()

    try:
        provider = get_llm_provider()
        health = await provider.check_health()
        return {"primary": health.__dict__}
    except Exception as e:
        logger.warning("llm_health_check_failed", error=str(e))
        return {
            "primary": {
                "available": False,
                "provider": settings.llm.provider,
                "error": str(e),
            }
        }


def reset_providers() -> None:
    """Drop cached provider singletons (for testing)."""
    from src.infrastructure.llm import gemini, ollama

    gemini._gemini_provider = None
    ollama._ollama_provider = None
