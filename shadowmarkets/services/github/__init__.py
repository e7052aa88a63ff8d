from .config import GithubConfig
from .exceptions import (
    GithubAPIError,
    GithubAuthError,
    GithubNotFoundError,
    GithubRateLimitError,
)
from .models import Issue

__all__ = [
    "GithubClient",
    "GithubConfig",
    "GithubAPIError",
    "GithubAuthError",
    "GithubNotFoundError",
    "GithubRateLimitError",
    "Issue",
]
