"""Text completion client for the configured LLM provider."""

import hashlib
import logging
from typing import Protocol

from app.config import Settings

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into a text reply."""

    async def complete(self, prompt: str) -> str: ...


class LLMClient:
    """Sends prompts to OpenAI or Anthropic and returns the raw text reply."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._openai_client = None
        self._anthropic_client = None

    def _get_openai_client(self):
        """Lazy load OpenAI client."""
        if self._openai_client is None:
            from openai import AsyncOpenAI
            self._openai_client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=0,
            )
        return self._openai_client

    def _get_anthropic_client(self):
        """Lazy load Anthropic client."""
        if self._anthropic_client is None:
            from anthropic import AsyncAnthropic
            self._anthropic_client = AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=0,
            )
        return self._anthropic_client

    async def _call_openai(self, prompt: str, model: str) -> str:
        """Call OpenAI API with deterministic settings."""
        client = self._get_openai_client()

        response = await client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0,
        )

        logger.info(f"OpenAI fingerprint: {response.system_fingerprint}")
        return response.choices[0].message.content or ""

    async def _call_anthropic(self, prompt: str, model: str) -> str:
        """Call Anthropic API."""
        client = self._get_anthropic_client()

        response = await client.messages.create(
            model=model,
            max_tokens=self.settings.llm_max_tokens,
            messages=[{"role": "user", "content": prompt}],
            temperature=0,
        )

        return "".join(block.text for block in response.content if block.type == "text")

    async def complete(self, prompt: str) -> str:
        """Call configured LLM provider."""
        provider = self.settings.llm_provider
        model = self.settings.llm_model

        prompt_hash = hashlib.md5(prompt.encode()).hexdigest()[:8]
        logger.info(f"Calling {provider} {model} (prompt hash {prompt_hash})...")

        if provider == "openai":
            return await self._call_openai(prompt, model)
        elif provider == "anthropic":
            return await self._call_anthropic(prompt, model)
        else:
            raise ValueError(f"Unknown LLM provider: {provider}")
