"""LLM oracle request/response models."""

from typing import Any

from pydantic import Field, field_validator

from shadowmarkets.sources.models import CamelModel

DEFAULT_CONFIDENCE = 0.6
DEFAULT_REASONING = "No reasoning provided."


class OracleRequest(CamelModel):
    question: str
    yes_definition: str
    no_definition: str
    evidence: dict[str, Any] = Field(default_factory=dict)
    instruction: str = ""


class OracleDecision(CamelModel):
    """Decision returned by the LLM oracle."""

    yes_winner: bool = Field(description="true if YES wins, false if NO wins")
    confidence: float = Field(
        default=DEFAULT_CONFIDENCE,
        description="Confidence in the decision from 0 to 1",
    )
    reasoning: str = Field(
        default=DEFAULT_REASONING,
        description="Short justification citing the evidence",
    )

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> float:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return DEFAULT_CONFIDENCE
        return min(max(float(v), 0.0), 1.0)

    @field_validator("reasoning", mode="before")
    @classmethod
    def default_reasoning(cls, v: Any) -> str:
        return v if isinstance(v, str) else DEFAULT_REASONING
