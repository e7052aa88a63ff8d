"""Test helpers: a controllable clock and sample events."""

from shadowmarkets.sources.models import GithubIssueWillClose, LocalBooleanSignal

NOW = 1_700_000_000


class Clock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def github_event(
    yes_means_closed: bool = True,
    end_time_seconds: int = NOW + 1800,
    issue_number: int = 7,
) -> GithubIssueWillClose:
    return GithubIssueWillClose(
        id=f"github:acme/widgets#{issue_number}@{end_time_seconds}",
        owner="acme",
        repo="widgets",
        issue_number=issue_number,
        yes_means_closed=yes_means_closed,
        question=f'Will issue #{issue_number} ("Fix login") be CLOSED before the deadline?',
        end_time_seconds=end_time_seconds,
    )


def local_event(
    event_id: str = "ship-v2",
    expected_yes: bool = True,
    end_time_seconds: int = NOW + 600,
) -> LocalBooleanSignal:
    return LocalBooleanSignal(
        id=event_id,
        signal_key=event_id,
        expected_yes=expected_yes,
        question=f"Will {event_id} happen?",
        end_time_seconds=end_time_seconds,
    )
