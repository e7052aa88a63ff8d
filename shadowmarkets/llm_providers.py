"""LLM provider enums and model string helpers for the pydantic-ai oracle."""

from enum import StrEnum


class LLMProvider(StrEnum):
    """Providers the pydantic-ai oracle can route to."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google-gla"


# Environment variable each provider's pydantic-ai client reads its key from
PROVIDER_API_KEY_ENV = {
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.GOOGLE: "GEMINI_API_KEY",
}


def get_provider_for_model(model: str) -> LLMProvider:
    """Determine the provider from a model name or a ``provider:model`` string."""
    if ":" in model:
        return LLMProvider(model.split(":", 1)[0])
    if model.startswith("claude"):
        return LLMProvider.ANTHROPIC
    elif model.startswith("gemini"):
        return LLMProvider.GOOGLE
    return LLMProvider.OPENAI


def get_model_string(model: str) -> str:
    """Get the pydantic-ai model string (``provider:model``) for a configured model."""
    if ":" in model:
        return model
    return f"{get_provider_for_model(model).value}:{model}"
