from shadowmarkets.config import Settings

from .base import LlmOracle
from .gemini import GeminiOracle
from .openai_compatible import OpenAiCompatibleOracle
from .pydantic_ai_oracle import PydanticAiOracle


def make_llm_oracle(settings: Settings) -> LlmOracle | None:
    """Build the configured oracle, or None when settlement is rule-only."""
    llm = settings.llm
    if llm.provider == "openai_compatible":
        return OpenAiCompatibleOracle(
            base_url=llm.base_url,
            api_key=settings.llm_api_key,
            model=llm.model,
            timeout_seconds=llm.timeout_seconds,
        )
    elif llm.provider == "gemini":
        return GeminiOracle(
            api_key=settings.llm_api_key,
            model=llm.model,
            timeout_seconds=llm.timeout_seconds,
        )
    elif llm.provider == "pydantic_ai":
        return PydanticAiOracle(model=llm.model, api_key=settings.llm_api_key)
    return None
