"""Oracle Agent: settles ended markets from collected evidence."""

from __future__ import annotations

import logging
from typing import Callable, Literal

from shadowmarkets.llm import LlmOracle
from shadowmarkets.services.chain import ChainClient
from shadowmarkets.sources import EventSource, PrivateEvent
from shadowmarkets.time_utils import format_seconds, now_seconds

from .decision import decide_outcome
from .models import NotSettled, Settled, SettleOutcome

logger = logging.getLogger(__name__)

UnhandledKindPolicy = Literal["refuse", "default_no"]


class OracleAgent:
    def __init__(
        self,
        chain: ChainClient,
        source: EventSource,
        llm: LlmOracle | None = None,
        unhandled_kind_policy: UnhandledKindPolicy = "refuse",
        clock: Callable[[], int] = now_seconds,
    ):
        self.chain = chain
        self.source = source
        self.llm = llm
        self.unhandled_kind_policy = unhandled_kind_policy
        self.clock = clock

    async def settle_if_ready(self, market: str, event: PrivateEvent) -> SettleOutcome:
        """Settle ``market`` if it has ended and is not yet resolved.

        EvidenceError and chain errors propagate; nothing is settled in that case.
        """
        account = await self.chain.fetch_market(market)
        if account.resolved:
            return NotSettled(reason="Market already resolved on-chain.")

        if self.clock() < account.end_time:
            return NotSettled(
                reason=f"Market not ended yet (end_time={account.end_time}, {format_seconds(account.end_time)})."
            )

        evidence = await self.source.collect_evidence(event)
        decision = await decide_outcome(event, evidence, self.llm)

        if not decision.handled and not decision.used_llm and self.unhandled_kind_policy == "refuse":
            logger.warning(f"Refusing to settle {market}: {decision.reasoning}")
            return NotSettled(
                reason=f"No settlement rule for event kind {event.kind}: {decision.reasoning}",
                refused=True,
            )

        settled = await self.chain.settle_market(market, decision.yes_winner)
        logger.info(
            f"Settled {market}: {'YES' if decision.yes_winner else 'NO'} "
            f"(used_llm={decision.used_llm}, sig={settled.signature})"
        )
        return Settled(
            signature=settled.signature,
            yes_winner=decision.yes_winner,
            reasoning=decision.reasoning,
            used_llm=decision.used_llm,
        )
