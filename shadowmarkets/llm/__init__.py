"""LLM oracle backends for settlement decisions."""

from .base import LlmOracle, extract_json_object, parse_oracle_decision
from .exceptions import LlmError, LlmResponseError
from .factory import make_llm_oracle
from .gemini import GeminiOracle
from .models import OracleDecision, OracleRequest
from .openai_compatible import OpenAiCompatibleOracle
from .prompts import NO_DEFINITION, YES_DEFINITION, build_oracle_request
from .pydantic_ai_oracle import PydanticAiOracle

__all__ = [
    "LlmOracle",
    "extract_json_object",
    "parse_oracle_decision",
    "LlmError",
    "LlmResponseError",
    "make_llm_oracle",
    "GeminiOracle",
    "OracleDecision",
    "OracleRequest",
    "OpenAiCompatibleOracle",
    "NO_DEFINITION",
    "YES_DEFINITION",
    "build_oracle_request",
    "PydanticAiOracle",
]
