from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from .config import GithubConfig
from .exceptions import (
    GithubAPIError,
    GithubAuthError,
    GithubNotFoundError,
    GithubRateLimitError,
)
from .models import Issue

logger = logging.getLogger(__name__)


class GithubClient:
    def __init__(
        self,
        config: GithubConfig | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or GithubConfig()
        self.token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> GithubClient:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.config.api_version,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("GithubClient must be used as async context manager")
        return self._client

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        retry_count = 0
        last_error: Exception | None = None

        while retry_count < self.config.max_retries:
            try:
                response = await self.client.request(method=method, url=endpoint, params=params)

                if response.status_code == 401:
                    raise GithubAuthError("GitHub token rejected", status_code=401)
                elif response.status_code == 404:
                    raise GithubNotFoundError(f"Resource not found: {endpoint}", status_code=404)
                elif response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0":
                    raise GithubRateLimitError("GitHub rate limit exhausted", status_code=403)
                elif response.status_code == 403:
                    raise GithubAuthError(f"Access denied: {endpoint}", status_code=403)
                elif response.status_code == 429 or response.status_code >= 500:
                    wait_time = 2 ** retry_count
                    logger.warning(
                        f"GitHub returned {response.status_code}, retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)
                    last_error = GithubAPIError(
                        f"HTTP {response.status_code}", status_code=response.status_code
                    )
                    retry_count += 1
                    continue

                if response.status_code >= 400:
                    raise GithubAPIError(
                        f"GitHub returned {response.status_code} for {endpoint}",
                        status_code=response.status_code,
                    )
                try:
                    return response.json()
                except ValueError as e:
                    raise GithubAPIError(
                        f"GitHub returned a non-JSON body for {endpoint}",
                        status_code=response.status_code,
                    ) from e

            except httpx.TimeoutException as e:
                last_error = e
                retry_count += 1
                if retry_count < self.config.max_retries:
                    logger.warning(f"GitHub timeout, retrying ({retry_count})...")
                    await asyncio.sleep(2)

            except httpx.RequestError as e:
                last_error = e
                logger.error(f"GitHub network error: {e}")
                break

        raise GithubAPIError(f"Request failed after {retry_count} retries: {last_error}")

    async def list_open_issues(self, owner: str, repo: str, per_page: int = 30) -> list[Issue]:
        endpoint = f"/repos/{owner}/{repo}/issues"
        data = await self._request("GET", endpoint, params={"state": "open", "per_page": per_page})
        if not isinstance(data, list):
            raise GithubAPIError(f"Unexpected issues payload for {owner}/{repo}")
        return [_parse_issue(item, endpoint) for item in data]

    async def get_issue(self, owner: str, repo: str, number: int) -> Issue:
        endpoint = f"/repos/{owner}/{repo}/issues/{number}"
        data = await self._request("GET", endpoint)
        return _parse_issue(data, endpoint)


def _parse_issue(data: Any, endpoint: str) -> Issue:
    try:
        return Issue.from_api(data)
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise GithubAPIError(f"Unexpected issue payload from {endpoint}: {e}") from e
