"""Private event and evidence models.

Persisted documents use camelCase keys (``issueNumber``, ``endTimeSeconds``) so
files stay readable by the bot process and operator tooling; Python code uses
snake_case attributes.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class GithubIssueWillClose(CamelModel):
    """Will a given issue be closed (or still open) by the deadline."""

    kind: Literal["githubIssueWillClose"] = "githubIssueWillClose"
    id: str
    owner: str
    repo: str
    issue_number: int
    yes_means_closed: bool = Field(
        description="True: YES when the issue is closed at the deadline. False: YES when still open."
    )
    question: str
    end_time_seconds: int


class LocalBooleanSignal(CamelModel):
    """A private boolean signal read from the local events file."""

    kind: Literal["localBooleanSignal"] = "localBooleanSignal"
    id: str
    signal_key: str
    expected_yes: bool
    question: str
    end_time_seconds: int


class DiscordPrediction(CamelModel):
    """A prediction statement posted to a watched Discord channel."""

    kind: Literal["discordPrediction"] = "discordPrediction"
    id: str
    guild_id: str
    channel_id: str
    message_id: str
    message_content: str
    author: str
    question: str
    end_time_seconds: int


class UnknownEvent(CamelModel):
    """Event of a kind this version does not recognise; raw fields are kept."""

    model_config = ConfigDict(extra="allow")

    kind: str
    id: str
    question: str = ""
    end_time_seconds: int = 0


KNOWN_KINDS = frozenset({"githubIssueWillClose", "localBooleanSignal", "discordPrediction"})


def _event_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("kind")
    else:
        kind = getattr(value, "kind", None)
    return kind if kind in KNOWN_KINDS else "unknown"


PrivateEvent = Annotated[
    Union[
        Annotated[GithubIssueWillClose, Tag("githubIssueWillClose")],
        Annotated[LocalBooleanSignal, Tag("localBooleanSignal")],
        Annotated[DiscordPrediction, Tag("discordPrediction")],
        Annotated[UnknownEvent, Tag("unknown")],
    ],
    Discriminator(_event_tag),
]

_event_adapter: TypeAdapter[PrivateEvent] = TypeAdapter(PrivateEvent)


def parse_event(data: dict[str, Any]) -> PrivateEvent:
    """Validate a raw event document into its variant."""
    return _event_adapter.validate_python(data)


class Evidence(CamelModel):
    """Resolvability data collected for an event at settlement time."""

    event_id: str
    collected_at_seconds: int
    payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def error(self) -> str | None:
        """Error marker set by sources that cannot produce evidence for the event."""
        error = self.payload.get("error")
        return str(error) if error is not None else None
