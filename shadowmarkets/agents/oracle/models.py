"""Data models for the Oracle agent."""

from typing import Literal

from pydantic import BaseModel


class Decision(BaseModel):
    """Settlement decision and its provenance.

    ``handled`` is False when no rule covered the event (unknown kind or
    evidence error) and the outcome is only the NO default.
    """

    yes_winner: bool
    reasoning: str
    used_llm: bool = False
    handled: bool = True


class NotSettled(BaseModel):
    did_settle: Literal[False] = False
    reason: str
    refused: bool = False


class Settled(BaseModel):
    did_settle: Literal[True] = True
    signature: str
    yes_winner: bool
    reasoning: str
    used_llm: bool


SettleOutcome = NotSettled | Settled
