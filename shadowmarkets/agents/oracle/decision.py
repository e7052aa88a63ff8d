"""Two-stage settlement decision: deterministic rule first, LLM override second."""

import json
import logging

from shadowmarkets.llm import LlmOracle, build_oracle_request
from shadowmarkets.sources.models import (
    Evidence,
    GithubIssueWillClose,
    LocalBooleanSignal,
    PrivateEvent,
)

from .models import Decision

logger = logging.getLogger(__name__)

FALLBACK_MARKER = "LLM failed, fallback used"


def deterministic_decision(event: PrivateEvent, evidence: Evidence) -> Decision:
    """Baseline decision from the event kind. Never raises."""
    if evidence.error:
        return Decision(
            yes_winner=False,
            reasoning=f"Evidence unavailable ({evidence.error}); defaulting to NO.",
            handled=False,
        )

    if isinstance(event, GithubIssueWillClose):
        state = evidence.payload.get("state")
        is_closed = state == "closed"
        yes_winner = is_closed if event.yes_means_closed else not is_closed
        return Decision(
            yes_winner=yes_winner,
            reasoning=(
                f"Deterministic rule: issue state={state}; YES means "
                f"{'closed' if event.yes_means_closed else 'open'} at deadline."
            ),
        )

    if isinstance(event, LocalBooleanSignal):
        value = evidence.payload.get("value")
        return Decision(
            yes_winner=value == event.expected_yes,
            reasoning=(
                f"Deterministic rule: signal {event.signal_key}={json.dumps(value)}; "
                f"expectedYes={json.dumps(event.expected_yes)}."
            ),
        )

    return Decision(
        yes_winner=False,
        reasoning=f"Unhandled event kind {event.kind}; defaulting to NO.",
        handled=False,
    )


async def decide_outcome(
    event: PrivateEvent,
    evidence: Evidence,
    llm: LlmOracle | None = None,
) -> Decision:
    """Baseline decision, overridden by the LLM when one is configured and answers."""
    baseline = deterministic_decision(event, evidence)
    if llm is None:
        return baseline

    request = build_oracle_request(event.question, evidence.to_json_dict())
    try:
        llm_decision = await llm.decide_yes_no(request)
    except Exception as e:
        logger.warning(f"LLM oracle failed for {event.id}, keeping rule decision: {e}")
        return baseline.model_copy(
            update={"reasoning": f"{baseline.reasoning} | {FALLBACK_MARKER}: {e}"}
        )

    return Decision(
        yes_winner=llm_decision.yes_winner,
        reasoning=f"LLM decision (confidence={llm_decision.confidence}): {llm_decision.reasoning}",
        used_llm=True,
    )
