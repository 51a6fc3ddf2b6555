"""
Google Gemini provider implementation.

Calls the Generative Language REST API (models/{model}:generateContent) over httpx.
"""

import time

import httpx

from src.config import get_logger, get_settings
from src.core.exceptions import (
    ConfigurationError,
    LLMResponseError,
    LLMUnavailableError,
    ModelNotFoundError,
)
from src.core.interfaces import HealthStatus, LLMResponse
from src.infrastructure.llm.base import BaseLLMProvider

logger = get_logger(__name__)


class GeminiProvider(BaseLLMProvider):
    """Gemini text generation over REST."""

    provider_name = "gemini"

    def __init__(self, api_key: str | None = None):
        super().__init__()
        settings = get_settings()
        self.host = settings.llm.gemini_host.rstrip("/")
        self.model = settings.llm.model_name
        self.api_key = api_key if api_key is not None else settings.llm.api_key
        self.timeout = settings.llm.timeout
        self.max_tokens = settings.llm.max_tokens
        self.temperature = settings.llm.temperature

    def _model_url(self, action: str = "") -> str:
        return f"{self.host}/v1beta/models/{self.model}{action}"

    async def _make_request(self, payload: dict) -> dict:
        """POST to generateContent and return the decoded body."""
        if not self.api_key:
            raise ConfigurationError(
                "LLM_API_KEY is not set for the Gemini provider",
                code="LLM_API_KEY_MISSING",
            )

        response = await self._post_json(
            self._model_url(":generateContent"),
            payload,
            timeout=self.timeout,
            params={"key": self.api_key},
        )

        if response.status_code == 404:
            raise ModelNotFoundError(self.model, "gemini")

        if response.status_code != 200:
            raise LLMUnavailableError("gemini", f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            return response.json()
        except ValueError as e:
            raise LLMResponseError("body is not JSON", response.text) from e

    @staticmethod
    def _extract_text(result: dict) -> tuple[str, str | None]:
        """Concatenate the text parts of the first candidate."""
        candidates = result.get("candidates") or []
        if not candidates:
            return "", None
        first = candidates[0]
        parts = (first.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        return text, first.get("finishReason")

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate text completion."""
        payload: dict = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": temperature if temperature is not None else self.temperature,
                "maxOutputTokens": max_tokens or self.max_tokens,
            },
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        async def _do_generate() -> LLMResponse:
            start_time = time.time()
            result = await self._make_request(payload)
            elapsed = time.time() - start_time

            text, finish_reason = self._extract_text(result)
            if not text.strip():
                logger.warning("gemini_empty_response", model=self.model, finish_reason=finish_reason)

            usage = result.get("usageMetadata") or {}
            logger.info(
                "gemini_generate",
                model=self.model,
                prompt_len=len(prompt),
                response_len=len(text),
                elapsed_ms=int(elapsed * 1000),
            )

            return LLMResponse(
                text=text,
                model=self.model,
                done_reason=finish_reason,
                prompt_tokens=usage.get("promptTokenCount", 0),
                completion_tokens=usage.get("candidatesTokenCount", 0),
                total_tokens=usage.get("totalTokenCount", 0),
            )

        return await self._with_resilience(_do_generate)

    async def check_health(self) -> HealthStatus:
        """Check the API key and model by fetching the model resource."""
        if not self.api_key:
            status = HealthStatus(
                available=False,
                provider="gemini",
                model=self.model,
                error="LLM_API_KEY is not set",
            )
            self._update_health_cache(status)
            return status

        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.get(self._model_url(), params={"key": self.api_key})

            if response.status_code != 200:
                status = HealthStatus(
                    available=False,
                    provider="gemini",
                    model=self.model,
                    error=f"HTTP {response.status_code}",
                )
            else:
                status = HealthStatus(
                    available=True,
                    provider="gemini",
                    model=self.model,
                    response_time_ms=(time.time() - start_time) * 1000,
                )

        except httpx.HTTPError as e:
            status = HealthStatus(
                available=False,
                provider="gemini",
                model=self.model,
                error=str(e) or type(e).__name__,
            )

        self._update_health_cache(status)
        return status


# Singleton instance
_gemini_provider: GeminiProvider | None = None


def get_gemini_provider() -> GeminiProvider:
    """Get singleton Gemini provider."""
    global _gemini_provider
    if _gemini_provider is None:
        _gemini_provider = GeminiProvider()
    return _gemini_provider
