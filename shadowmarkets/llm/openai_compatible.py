"""OpenAI-compatible chat completions oracle."""

from __future__ import annotations

import logging

import httpx

from .base import parse_oracle_decision
from .exceptions import LlmError
from .models import OracleDecision, OracleRequest
from .prompts import ORACLE_SYSTEM_PROMPT, build_oracle_prompt

logger = logging.getLogger(__name__)


class OpenAiCompatibleOracle:
    """Works with any server exposing ``POST {base_url}/chat/completions``."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        model: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def decide_yes_no(self, request: OracleRequest) -> OracleDecision:
        body = {
            "model": self.model,
            "temperature": 0,
            "messages": [
                {"role": "system", "content": ORACLE_SYSTEM_PROMPT},
                {"role": "user", "content": build_oracle_prompt(request)},
            ],
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=body,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            raise LlmError(f"LLM request failed: {e}") from e

        if response.status_code >= 400:
            raise LlmError(
                f"LLM request failed: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LlmError("LLM response missing content") from e

        decision = parse_oracle_decision(content)
        logger.info(f"LLM ({self.model}) decided yes_winner={decision.yes_winner}")
        return decision
