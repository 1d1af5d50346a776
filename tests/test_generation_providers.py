import json
from types import SimpleNamespace

import pytest

from storytests.core.errors import GenerationError
from storytests.models.schemas import GenerateRequest
from storytests.repositories.implementations.gemini_service import GeminiService
from storytests.repositories.implementations.openai_service import OpenAIService

REQUEST = GenerateRequest(story_title="Checkout", acceptance_criteria="Card is charged")


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return SimpleNamespace(
            model="gpt-test",
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))],
            usage=SimpleNamespace(prompt_tokens=50, completion_tokens=25),
        )


def openai_with(completions):
    return OpenAIService(client=SimpleNamespace(chat=SimpleNamespace(completions=completions)))


@pytest.mark.asyncio
async def test_openai_generates_cases_and_reports_usage():
    completions = FakeCompletions(
        content=json.dumps({"cases": [{"title": "Charge card", "category": "Positive", "steps": ["Pay"], "expectedResult": "Charged"}]})
    )
    response = await openai_with(completions).generate_test_cases(REQUEST)

    assert response.model == "gpt-test"
    assert response.prompt_tokens == 50
    assert response.completion_tokens == 25
    assert response.cases[0].id == "TC-001"
    messages = completions.calls[0]["messages"]
    assert messages[0]["role"] == "system"
    assert "Card is charged" in messages[1]["content"]


@pytest.mark.asyncio
async def test_openai_keeps_cases_when_steps_are_scalar():
    completions = FakeCompletions(
        content=json.dumps({"cases": [{"title": "Charge card", "steps": 5}, {"title": "Refund", "steps": ["Refund order"]}]})
    )
    response = await openai_with(completions).generate_test_cases(REQUEST)
    assert [c.steps for c in response.cases] == [["5"], ["Refund order"]]


@pytest.mark.asyncio
async def test_openai_scalar_cases_is_a_generation_error():
    with pytest.raises(GenerationError, match="no test cases"):
        await openai_with(FakeCompletions(content='{"cases": 5}')).generate_test_cases(REQUEST)


@pytest.mark.asyncio
async def test_openai_empty_reply_is_an_error():
    with pytest.raises(GenerationError):
        await openai_with(FakeCompletions(content="no json here")).generate_test_cases(REQUEST)


@pytest.mark.asyncio
async def test_openai_sdk_failure_is_wrapped():
    with pytest.raises(GenerationError, match="Generation provider error"):
        await openai_with(FakeCompletions(error=RuntimeError("rate limited"))).generate_test_cases(REQUEST)


@pytest.mark.asyncio
async def test_unconfigured_providers(monkeypatch):
    from storytests.config.settings import settings

    monkeypatch.setattr(settings, "openai_api_key", None)
    monkeypatch.setattr(settings, "gemini_api_key", None)

    openai = OpenAIService()
    gemini = GeminiService()
    assert not openai.is_configured
    assert not gemini.is_configured
    with pytest.raises(GenerationError, match="OPENAI_API_KEY"):
        await openai.generate_test_cases(REQUEST)
    with pytest.raises(GenerationError, match="GEMINI_API_KEY"):
        await gemini.generate_test_cases(REQUEST)
