"""GitHub issue source: one market per open issue, settled on closed state."""

from __future__ import annotations

import logging
from typing import Callable

from shadowmarkets.services.github import GithubAPIError, GithubClient
from shadowmarkets.time_utils import now_seconds

from .base import EventSource
from .exceptions import EventSourceError, EvidenceError
from .ledger import ConsumedLedger
from .models import Evidence, GithubIssueWillClose, PrivateEvent

logger = logging.getLogger(__name__)


class GithubIssueSource(EventSource):
    name = "github"

    def __init__(
        self,
        client: GithubClient,
        owner: str,
        repo: str,
        ledger: ConsumedLedger,
        window_seconds: int = 1800,
        per_page: int = 30,
        clock: Callable[[], int] = now_seconds,
    ):
        super().__init__(ledger, clock)
        self.client = client
        self.owner = owner
        self.repo = repo
        self.window_seconds = window_seconds
        self.per_page = per_page

    @property
    def repo_slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    async def next_event(self) -> PrivateEvent | None:
        try:
            async with self.client:
                issues = await self.client.list_open_issues(
                    self.owner, self.repo, per_page=self.per_page
                )
        except GithubAPIError as e:
            raise EventSourceError(
                f"Failed to list issues for {self.repo_slug}: {e}", source=self.name
            ) from e

        consumed = set(self.ledger.ids())
        for issue in issues:
            if issue.is_pull_request or issue.number in consumed:
                continue

            end = self.clock() + self.window_seconds
            event = GithubIssueWillClose(
                id=f"github:{self.repo_slug}#{issue.number}@{end}",
                owner=self.owner,
                repo=self.repo,
                issue_number=issue.number,
                yes_means_closed=True,
                question=f'Will issue #{issue.number} ("{issue.title}") be CLOSED before the deadline?',
                end_time_seconds=end,
            )
            self.ledger.add(issue.number)
            logger.info(f"Emitting GitHub event {event.id}")
            return event

        logger.debug(f"No unconsumed issues in {self.repo_slug}")
        return None

    async def collect_evidence(self, event: PrivateEvent) -> Evidence:
        if not isinstance(event, GithubIssueWillClose):
            return self._unsupported(event)

        try:
            async with self.client:
                issue = await self.client.get_issue(event.owner, event.repo, event.issue_number)
        except GithubAPIError as e:
            raise EvidenceError(
                f"Failed to fetch issue #{event.issue_number} of {event.owner}/{event.repo}: {e}",
                source=self.name,
            ) from e

        return Evidence(
            event_id=event.id,
            collected_at_seconds=self.clock(),
            payload={
                "kind": event.kind,
                "state": issue.state,
                "closed_at": issue.closed_at,
                "updated_at": issue.updated_at,
            },
        )
