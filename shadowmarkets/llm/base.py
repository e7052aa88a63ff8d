"""LLM oracle contract and response parsing."""

import json
from typing import Any, Protocol

from pydantic import ValidationError

from .exceptions import LlmResponseError
from .models import OracleDecision, OracleRequest


class LlmOracle(Protocol):
    async def decide_yes_no(self, request: OracleRequest) -> OracleDecision: ...


def extract_json_object(text: str) -> str:
    """Return the outermost ``{...}`` span, tolerating prose or code fences around it."""
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last <= first:
        return text
    return text[first : last + 1]


def parse_oracle_decision(text: str | None) -> OracleDecision:
    """Parse model output into a decision.

    ``yesWinner`` must be a JSON boolean. ``confidence`` is clamped to [0, 1]
    and defaults to 0.6; a missing ``reasoning`` gets a placeholder.
    """
    if not text or not text.strip():
        raise LlmResponseError("LLM response missing content")

    try:
        data: Any = json.loads(extract_json_object(text))
    except json.JSONDecodeError as e:
        raise LlmResponseError(f"LLM response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise LlmResponseError("LLM response is not a JSON object")
    if not isinstance(data.get("yesWinner"), bool):
        raise LlmResponseError(f"LLM response has no boolean yesWinner: {data.get('yesWinner')!r}")

    try:
        return OracleDecision.model_validate(data)
    except ValidationError as e:
        raise LlmResponseError(f"Invalid LLM decision: {e}") from e
