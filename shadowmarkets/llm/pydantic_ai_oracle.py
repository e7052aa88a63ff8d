"""pydantic-ai oracle with structured output."""

import logging

from pydantic_ai import Agent

from shadowmarkets.agents.agent_factory import AgentFactory
from shadowmarkets.llm_providers import get_model_string

from .exceptions import LlmError
from .models import OracleDecision, OracleRequest
from .prompts import ORACLE_SYSTEM_PROMPT, build_oracle_prompt

logger = logging.getLogger(__name__)


class PydanticAiOracle:
    def __init__(self, model: str, api_key: str | None = None):
        self.model = model
        self._factory: AgentFactory[None, OracleDecision] = AgentFactory(
            create_fn=self._create_agent,
            model=model,
            api_key=api_key,
        )

    def _create_agent(self) -> Agent[None, OracleDecision]:
        return Agent(
            model=get_model_string(self.model),
            output_type=OracleDecision,
            system_prompt=ORACLE_SYSTEM_PROMPT,
        )

    async def decide_yes_no(self, request: OracleRequest) -> OracleDecision:
        try:
            result = await self._factory.get_agent().run(build_oracle_prompt(request))
        except Exception as e:
            raise LlmError(f"pydantic-ai oracle failed: {e}") from e

        decision = result.output
        logger.info(f"pydantic-ai ({self.model}) decided yes_winner={decision.yes_winner}")
        return decision
