"""AI text generation clients.

Handlers depend only on the ``TextGenerator`` call shape
``(prompt, system_prompt) -> text``, so tests can pass a plain coroutine.
``create_text_generator`` picks the provider named in settings.
"""

import logging
from typing import Awaitable, Callable, Dict, Optional

import anthropic
import openai

from careerai.config import Settings
from careerai.jobs.errors import HandlerError

logger = logging.getLogger(__name__)

TextGenerator = Callable[[str, Optional[str]], Awaitable[str]]

DEFAULT_MODELS: Dict[str, str] = {
    "anthropic": "claude-sonnet-4-20250514",
    "openai": "gpt-4o",
}


class AnthropicTextGenerator:
    """Claude text generation via the async Anthropic SDK."""

    provider_name = "anthropic"

    def __init__(self, model: str, max_tokens: int = 8000, api_key: Optional[str] = None):
        self.model_name = model
        self._max_tokens = max_tokens
        # api_key=None falls back to ANTHROPIC_API_KEY from the environment
        self._client = anthropic.AsyncAnthropic(api_key=api_key)

    async def __call__(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        kwargs = {
            "model": self.model_name,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error("Claude generation error: %s", e)
            raise HandlerError(f"AI request failed: {e}") from e

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        ).strip()
        if not text:
            raise HandlerError("No content received from AI")
        logger.debug("Claude response: %d characters", len(text))
        return text


class OpenAITextGenerator:
    """GPT text generation via the async OpenAI SDK."""

    provider_name = "openai"

    def __init__(self, model: str, max_tokens: int = 8000, api_key: Optional[str] = None):
        self.model_name = model
        self._max_tokens = max_tokens
        # api_key=None falls back to OPENAI_API_KEY from the environment
        self._client = openai.AsyncOpenAI(api_key=api_key)

    async def __call__(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self._client.chat.completions.create(
                model=self.model_name,
                max_tokens=self._max_tokens,
                messages=messages,
            )
        except openai.APIError as e:
            logger.error("OpenAI generation error: %s", e)
            raise HandlerError(f"AI request failed: {e}") from e

        text = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not text:
            raise HandlerError("No content received from AI")
        logger.debug("OpenAI response: %d characters", len(text))
        return text


def create_text_generator(settings: Settings) -> TextGenerator:
    """Build the generator for ``settings.ai_provider``.

    Raises:
        ValueError: If the provider is not supported.
    """
    provider = settings.ai_provider.lower()
    if provider not in DEFAULT_MODELS:
        available = ", ".join(DEFAULT_MODELS)
        raise ValueError(
            f"Unknown AI provider: '{provider}'. Available providers: {available}"
        )

    model = settings.ai_model or DEFAULT_MODELS[provider]
    logger.info("Using %s model %s for job handlers", provider, model)
    if provider == "openai":
        return OpenAITextGenerator(
            model, max_tokens=settings.ai_max_tokens, api_key=settings.openai_api_key
        )
    return AnthropicTextGenerator(
        model, max_tokens=settings.ai_max_tokens, api_key=settings.anthropic_api_key
    )
