"""Prompts shared by every LLM oracle backend."""

import json
from typing import Any

from .models import OracleRequest

ORACLE_SYSTEM_PROMPT = (
    "You are an oracle for a binary prediction market. Output ONLY valid JSON with keys: "
    "yesWinner (boolean), confidence (0-1 number), reasoning (string)."
)

YES_DEFINITION = "YES wins if the event condition is true at/after the market deadline."
NO_DEFINITION = "NO wins otherwise."

ORACLE_INSTRUCTION = (
    "Decide strictly based on evidence. If evidence is missing or inconclusive, choose the "
    "most defensible outcome and set confidence <= 0.55."
)


def build_oracle_request(question: str, evidence: dict[str, Any]) -> OracleRequest:
    return OracleRequest(
        question=question,
        yes_definition=YES_DEFINITION,
        no_definition=NO_DEFINITION,
        evidence=evidence,
        instruction=ORACLE_INSTRUCTION,
    )


def build_oracle_prompt(request: OracleRequest) -> str:
    """Serialize the request as the user message (camelCase JSON)."""
    return json.dumps(request.to_json_dict())
