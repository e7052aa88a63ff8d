"""Decision tables for the settlement pipeline."""

import asyncio

import pytest

from shadowmarkets.agents.oracle import FALLBACK_MARKER, decide_outcome, deterministic_decision
from shadowmarkets.llm import LlmError, OracleDecision
from shadowmarkets.sources.models import DiscordPrediction, Evidence, UnknownEvent

from tests.helpers import NOW, github_event, local_event


def _evidence(event, **payload) -> Evidence:
    return Evidence(event_id=event.id, collected_at_seconds=NOW, payload={"kind": event.kind, **payload})


class StubLlm:
    def __init__(self, decision: OracleDecision | None = None, error: Exception | None = None):
        self.decision = decision
        self.error = error
        self.requests = []

    async def decide_yes_no(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.decision


@pytest.mark.parametrize(
    "yes_means_closed, state, expected",
    [
        (True, "closed", True),
        (True, "open", False),
        (False, "closed", False),
        (False, "open", True),
    ],
)
def test_github_rule(yes_means_closed: bool, state: str, expected: bool) -> None:
    event = github_event(yes_means_closed=yes_means_closed)

    decision = deterministic_decision(event, _evidence(event, state=state))

    assert decision.yes_winner is expected
    assert decision.handled is True
    assert f"state={state}" in decision.reasoning


@pytest.mark.parametrize(
    "expected_yes, value, expected",
    [
        (True, True, True),
        (True, False, False),
        (False, False, True),
        (False, True, False),
        (True, None, False),
        (False, None, False),
    ],
)
def test_local_signal_rule(expected_yes: bool, value, expected: bool) -> None:
    event = local_event(expected_yes=expected_yes)

    decision = deterministic_decision(event, _evidence(event, signalKey=event.signal_key, value=value))

    assert decision.yes_winner is expected
    assert decision.handled is True


def test_discord_has_no_rule() -> None:
    event = DiscordPrediction(
        id="d1",
        guild_id="g",
        channel_id="c",
        message_id="m",
        message_content="It rains",
        author="a",
        question="Will it rain?",
        end_time_seconds=NOW,
    )

    decision = deterministic_decision(event, _evidence(event, resolved=False))

    assert decision.yes_winner is False
    assert decision.handled is False
    assert "discordPrediction" in decision.reasoning


def test_unknown_kind_defaults_to_no() -> None:
    event = UnknownEvent(kind="twitterPoll", id="t1", question="?", end_time_seconds=NOW)

    decision = deterministic_decision(event, _evidence(event))

    assert decision.yes_winner is False
    assert decision.handled is False


def test_evidence_error_is_unhandled() -> None:
    event = github_event()
    evidence = Evidence(event_id=event.id, collected_at_seconds=NOW, payload={"error": "wrong source"})

    decision = deterministic_decision(event, evidence)

    assert decision.yes_winner is False
    assert decision.handled is False


def test_without_llm_returns_baseline() -> None:
    event = github_event()

    decision = asyncio.run(decide_outcome(event, _evidence(event, state="closed"), None))

    assert decision.yes_winner is True
    assert decision.used_llm is False


def test_llm_overrides_baseline() -> None:
    event = github_event()
    llm = StubLlm(OracleDecision(yes_winner=False, confidence=0.9, reasoning="Closed as won't fix"))

    decision = asyncio.run(decide_outcome(event, _evidence(event, state="closed"), llm))

    assert decision.yes_winner is False
    assert decision.used_llm is True
    assert decision.reasoning == "LLM decision (confidence=0.9): Closed as won't fix"
    request = llm.requests[0]
    assert request.question == event.question
    assert request.evidence["payload"]["state"] == "closed"
    assert request.yes_definition.startswith("YES wins")


def test_llm_failure_falls_back_to_baseline() -> None:
    event = github_event()
    llm = StubLlm(error=LlmError("connection refused"))

    decision = asyncio.run(decide_outcome(event, _evidence(event, state="closed"), llm))

    assert decision.yes_winner is True
    assert decision.used_llm is False
    assert FALLBACK_MARKER in decision.reasoning
    assert "connection refused" in decision.reasoning


def test_llm_decides_kind_without_rule() -> None:
    event = UnknownEvent(kind="twitterPoll", id="t1", question="?", end_time_seconds=NOW)
    llm = StubLlm(OracleDecision(yes_winner=True, confidence=0.7, reasoning="Poll passed"))

    decision = asyncio.run(decide_outcome(event, _evidence(event), llm))

    assert decision.yes_winner is True
    assert decision.used_llm is True
    assert decision.handled is True
