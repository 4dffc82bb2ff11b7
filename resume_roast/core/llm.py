"""Central LLM client — one configured provider, one attempt per call.

All calls are async. Thread-safe singleton via asyncio.Lock.
Provider is picked by LLM_PROVIDER (anthropic | openai | gemini).
OpenAI calls go through langfuse.openai so they are traced automatically.

No automatic retry: a timeout already bounds latency, and a bad reply
should fail visibly rather than multiply the wait. Every transport,
timeout, backend, or empty-reply failure surfaces as InvocationFailed.
"""

import asyncio
from abc import ABC, abstractmethod

import anthropic
import google.generativeai as genai
import httpx
import openai as openai_errors
from google.api_core import exceptions as google_errors
from langfuse.openai import AsyncOpenAI

from resume_roast.config import Settings, load_settings
from resume_roast.core.errors import InvocationFailed
from resume_roast.core.logger import logger

# Provider-side failures that map to InvocationFailed
_BACKEND_ERRORS = (
    anthropic.APIError,
    openai_errors.APIError,
    google_errors.GoogleAPIError,
    httpx.HTTPError,
)


class LLMProvider(ABC):
    """Base for generation backends.

    Subclasses implement ``_call_api`` for a single request and return the
    reply text, or None when the backend answered without any text.
    """

    _provider_prefix: str

    name: str
    model: str

    def __init__(self, model: str, max_tokens: int, timeout: float):
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.name = f"{self._provider_prefix}/{model}"

    @abstractmethod
    async def _call_api(self, prompt: str, name: str | None = None) -> str | None:
        """Make a single API call (no retries)."""


class AnthropicProvider(LLMProvider):
    _provider_prefix = "anthropic"

    def __init__(self, api_key: str, model: str, max_tokens: int, timeout: float):
        super().__init__(model, max_tokens, timeout)
        self.client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def _call_api(self, prompt: str, name: str | None = None) -> str | None:
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        for block in message.content:
            if block.type == "text":
                return block.text
        return None


class OpenAIProvider(LLMProvider):
    _provider_prefix = "openai"

    def __init__(self, api_key: str, model: str, max_tokens: int, timeout: float):
        super().__init__(model, max_tokens, timeout)
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def _call_api(self, prompt: str, name: str | None = None) -> str | None:
        kwargs = dict(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.max_tokens,
        )
        if name:
            kwargs["name"] = name

        response = await self.client.chat.completions.create(**kwargs)

        if not response.choices:
            return None
        return response.choices[0].message.content


class GeminiProvider(LLMProvider):
    _provider_prefix = "gemini"

    def __init__(self, api_key: str, model: str, max_tokens: int, timeout: float):
        super().__init__(model, max_tokens, timeout)
        genai.configure(api_key=api_key)
        self.client = genai.GenerativeModel(self.model)

    async def _call_api(self, prompt: str, name: str | None = None) -> str | None:
        response = await self.client.generate_content_async(
            prompt,
            generation_config={"max_output_tokens": self.max_tokens},
            request_options={"timeout": self.timeout},
        )
        try:
            return response.text
        except ValueError:
            # Raised when the candidate carries no text part (blocked, empty, ...)
            return None


def get_provider(settings: Settings) -> LLMProvider | None:
    """Build the configured provider. None when its API key is missing."""
    provider_name = settings.llm_provider.lower()
    common = dict(max_tokens=settings.llm_max_output_tokens, timeout=settings.llm_timeout_seconds)

    if provider_name == "anthropic":
        if not settings.anthropic_api_key:
            return None
        return AnthropicProvider(settings.anthropic_api_key, settings.anthropic_model, **common)
    if provider_name == "openai":
        if not settings.openai_api_key:
            return None
        return OpenAIProvider(settings.openai_api_key, settings.openai_model, **common)
    if provider_name == "gemini":
        if not settings.google_ai_api_key:
            return None
        return GeminiProvider(settings.google_ai_api_key, settings.gemini_model, **common)
    raise ValueError(f"Unknown provider: {provider_name}. Use 'anthropic', 'openai' or 'gemini'")


class LLMClient:
    """Sends one prompt, returns one text reply."""

    def __init__(self, provider: LLMProvider | None = None, timeout: float | None = None):
        settings = load_settings()
        self.provider = provider if provider is not None else get_provider(settings)
        self.timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        self._provider_name = settings.llm_provider

    async def invoke(self, prompt: str, name: str | None = None) -> str:
        """Send ``prompt`` to the backend and return its raw text reply.

        Raises:
            InvocationFailed on transport/backend error, timeout, or a reply
            without text.
        """
        if self.provider is None:
            raise InvocationFailed(f"No API key configured for provider '{self._provider_name}'")

        try:
            text = await asyncio.wait_for(self.provider._call_api(prompt, name=name), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"{self.provider.name} timed out after {self.timeout}s")
            raise InvocationFailed(f"Model did not respond within {self.timeout:g}s") from e
        except _BACKEND_ERRORS as e:
            logger.warning(f"{self.provider.name} call failed: {e}")
            raise InvocationFailed(f"{type(e).__name__}: {e}") from e

        if not text or not text.strip():
            logger.warning(f"{self.provider.name} returned no text content")
            raise InvocationFailed("Model reply contained no text")

        return text


_client: LLMClient | None = None
_lock = asyncio.Lock()


async def get_llm_client() -> LLMClient:
    """Get or create the singleton LLM client (thread-safe)."""
    global _client
    if _client is None:
        async with _lock:
            if _client is None:
                _client = LLMClient()
    return _client
