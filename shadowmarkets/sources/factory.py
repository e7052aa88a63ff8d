"""Build the configured event source."""

from shadowmarkets.config import Settings
from shadowmarkets.services.github import GithubClient, GithubConfig

from .base import EventSource
from .discord import DiscordQueueSource
from .github import GithubIssueSource
from .ledger import FileConsumedLedger
from .local import LocalSignalSource


def make_event_source(settings: Settings) -> EventSource:
    source = settings.source

    if source.kind == "github":
        client = GithubClient(
            GithubConfig(base_url=source.github_api_url),
            token=settings.github_token or None,
        )
        return GithubIssueSource(
            client=client,
            owner=source.github_owner,
            repo=source.github_repo,
            ledger=FileConsumedLedger(settings.data_path(source.github_consumed_file)),
            window_seconds=source.github_window_seconds,
            per_page=source.github_per_page,
        )

    if source.kind == "discord":
        return DiscordQueueSource(
            guild_id=source.discord_guild_id,
            channel_id=source.discord_channel_id,
            pending_path=settings.data_path(source.discord_pending_file),
            ledger=FileConsumedLedger(settings.data_path(source.discord_consumed_file)),
            window_seconds=source.discord_window_seconds,
        )

    return LocalSignalSource(settings.data_path(source.local_events_file))
