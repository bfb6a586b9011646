from types import SimpleNamespace

import pytest

from careerai.ai.client import (
    AnthropicTextGenerator,
    OpenAITextGenerator,
    create_text_generator,
)
from careerai.config import Settings
from careerai.jobs.errors import HandlerError


class RecordingCompletions:

    def __init__(self, response):
        self.response = response
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return self.response


def test_factory_defaults_to_anthropic():
    generator = create_text_generator(Settings(anthropic_api_key="test-key"))

    assert isinstance(generator, AnthropicTextGenerator)
    assert generator.model_name == "claude-sonnet-4-20250514"


def test_factory_builds_openai_with_configured_model():
    generator = create_text_generator(
        Settings(ai_provider="OpenAI", ai_model="gpt-4o-mini", openai_api_key="test-key")
    )

    assert isinstance(generator, OpenAITextGenerator)
    assert generator.provider_name == "openai"
    assert generator.model_name == "gpt-4o-mini"


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError, match="Unknown AI provider"):
        create_text_generator(Settings(ai_provider="gemini"))


@pytest.mark.asyncio
async def test_openai_generator_sends_system_prompt():
    generator = OpenAITextGenerator("gpt-4o", max_tokens=100, api_key="test-key")
    completions = RecordingCompletions(
        SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=" Hello "))])
    )
    generator._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))

    assert await generator("Write a letter", "Be concise") == "Hello"
    assert completions.kwargs["messages"] == [
        {"role": "system", "content": "Be concise"},
        {"role": "user", "content": "Write a letter"},
    ]
    assert completions.kwargs["max_tokens"] == 100


@pytest.mark.asyncio
async def test_anthropic_generator_rejects_empty_response():
    generator = AnthropicTextGenerator("claude-sonnet-4-20250514", api_key="test-key")
    messages = RecordingCompletions(SimpleNamespace(content=[]))
    generator._client = SimpleNamespace(messages=messages)

    with pytest.raises(HandlerError, match="No content received from AI"):
        await generator("Parse this resume", None)
    assert "system" not in messages.kwargs
