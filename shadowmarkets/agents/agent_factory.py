"""Generic agent factory for managing singleton pydantic-ai agent instances."""

import logging
import os
from typing import Callable, Generic, TypeVar

from pydantic_ai import Agent

from shadowmarkets.llm_providers import PROVIDER_API_KEY_ENV, get_provider_for_model

logger = logging.getLogger(__name__)

DepsT = TypeVar("DepsT")
OutputT = TypeVar("OutputT")


class AgentFactory(Generic[DepsT, OutputT]):
    """Creates an agent on first use, after exporting the provider API key."""

    def __init__(
        self,
        create_fn: Callable[[], Agent[DepsT, OutputT]],
        model: str,
        api_key: str | None = None,
    ):
        """Initialize the agent factory.

        Args:
            create_fn: Function that creates a new agent instance
            model: Configured model name, used to pick the provider's key variable
            api_key: Key exported for the provider before the agent is created
        """
        self._create_fn = create_fn
        self._model = model
        self._api_key = api_key
        self._agent: Agent[DepsT, OutputT] | None = None

    def get_agent(self) -> Agent[DepsT, OutputT]:
        """Get or create the singleton agent instance."""
        if self._agent is None:
            self._setup_api_keys()
            self._agent = self._create_fn()
        return self._agent

    def _setup_api_keys(self) -> None:
        if not self._api_key:
            return
        env_var = PROVIDER_API_KEY_ENV[get_provider_for_model(self._model)]
        os.environ[env_var] = self._api_key
        logger.debug(f"Exported {env_var} for {self._model}")
