"""Tests for LLM response parsing and the HTTP oracle backends."""

import asyncio
import json

import httpx
import pytest

from shadowmarkets.llm import (
    GeminiOracle,
    LlmError,
    LlmResponseError,
    OpenAiCompatibleOracle,
    build_oracle_request,
    parse_oracle_decision,
)
from shadowmarkets.llm_providers import get_model_string


def _request():
    return build_oracle_request("Will #7 close?", {"payload": {"state": "closed"}})


def test_parse_tolerates_surrounding_prose() -> None:
    text = 'Sure! ```json\n{"yesWinner": true, "confidence": 0.8, "reasoning": "closed"}\n``` done'

    decision = parse_oracle_decision(text)

    assert decision.yes_winner is True
    assert decision.confidence == 0.8
    assert decision.reasoning == "closed"


def test_parse_clamps_and_defaults() -> None:
    assert parse_oracle_decision('{"yesWinner": false, "confidence": 7}').confidence == 1.0
    assert parse_oracle_decision('{"yesWinner": false, "confidence": -2}').confidence == 0.0

    decision = parse_oracle_decision('{"yesWinner": false, "confidence": "high", "reasoning": 3}')
    assert decision.confidence == 0.6
    assert decision.reasoning == "No reasoning provided."


@pytest.mark.parametrize(
    "text",
    [
        "",
        "no json here",
        '{"yesWinner": "true"}',
        '{"confidence": 0.9}',
        "[true]",
    ],
)
def test_parse_rejects_unusable_output(text: str) -> None:
    with pytest.raises(LlmResponseError):
        parse_oracle_decision(text)


def test_request_prompt_uses_camel_case() -> None:
    body = _request().to_json_dict()

    assert body["question"] == "Will #7 close?"
    assert "yesDefinition" in body
    assert "noDefinition" in body


def test_openai_compatible_oracle() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        content = '{"yesWinner": true, "confidence": 0.9, "reasoning": "Issue closed"}'
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    oracle = OpenAiCompatibleOracle(
        base_url="https://llm.test/v1/",
        api_key="sk-test",
        model="gpt-4o-mini",
        transport=httpx.MockTransport(handler),
    )

    decision = asyncio.run(oracle.decide_yes_no(_request()))

    assert decision.yes_winner is True
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert seen["body"]["messages"][0]["role"] == "system"
    assert json.loads(seen["body"]["messages"][1]["content"])["question"] == "Will #7 close?"


def test_openai_compatible_http_error() -> None:
    oracle = OpenAiCompatibleOracle(
        base_url="https://llm.test/v1",
        api_key="sk-test",
        model="m",
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")),
    )

    with pytest.raises(LlmError) as exc_info:
        asyncio.run(oracle.decide_yes_no(_request()))

    assert exc_info.value.status_code == 500


def test_openai_compatible_missing_content() -> None:
    oracle = OpenAiCompatibleOracle(
        base_url="https://llm.test/v1",
        api_key="sk-test",
        model="m",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []})),
    )

    with pytest.raises(LlmError, match="missing content"):
        asyncio.run(oracle.decide_yes_no(_request()))


def test_gemini_oracle() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.headers["x-goog-api-key"]
        text = '{"yesWinner": false, "confidence": 0.4, "reasoning": "Still open"}'
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})

    oracle = GeminiOracle(
        api_key="g-key",
        model="gemini-2.0-flash",
        base_url="https://gemini.test/v1beta",
        transport=httpx.MockTransport(handler),
    )

    decision = asyncio.run(oracle.decide_yes_no(_request()))

    assert decision.yes_winner is False
    assert decision.confidence == 0.4
    assert seen["path"] == "/v1beta/models/gemini-2.0-flash:generateContent"
    assert seen["key"] == "g-key"


def test_gemini_rejects_non_boolean_answer() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        text = '{"yesWinner": "yes"}'
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})

    oracle = GeminiOracle(api_key="k", model="m", transport=httpx.MockTransport(handler))

    with pytest.raises(LlmResponseError):
        asyncio.run(oracle.decide_yes_no(_request()))


@pytest.mark.parametrize(
    "model, expected",
    [
        ("gpt-4o-mini", "openai:gpt-4o-mini"),
        ("claude-haiku-4-5", "anthropic:claude-haiku-4-5"),
        ("gemini-2.5-flash", "google-gla:gemini-2.5-flash"),
        ("anthropic:claude-sonnet-4-5", "anthropic:claude-sonnet-4-5"),
    ],
)
def test_pydantic_ai_model_string(model: str, expected: str) -> None:
    assert get_model_string(model) == expected
