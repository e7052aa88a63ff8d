"""Google Gemini ``generateContent`` oracle."""

from __future__ import annotations

import logging

import httpx

from .base import parse_oracle_decision
from .exceptions import LlmError
from .models import OracleDecision, OracleRequest
from .prompts import ORACLE_SYSTEM_PROMPT, build_oracle_prompt

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


class GeminiOracle:
    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_seconds: float = 30.0,
        base_url: str = GEMINI_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    async def decide_yes_no(self, request: OracleRequest) -> OracleDecision:
        prompt = f"{ORACLE_SYSTEM_PROMPT}\n\nTask:\n{build_oracle_prompt(request)}"
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0, "responseMimeType": "application/json"},
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.base_url}/models/{self.model}:generateContent",
                    json=body,
                    headers={"x-goog-api-key": self.api_key},
                )
        except httpx.HTTPError as e:
            raise LlmError(f"Gemini request failed: {e}") from e

        if response.status_code >= 400:
            raise LlmError(
                f"Gemini request failed: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        try:
            content = response.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LlmError("Gemini response missing content") from e

        decision = parse_oracle_decision(content)
        logger.info(f"Gemini ({self.model}) decided yes_winner={decision.yes_winner}")
        return decision
