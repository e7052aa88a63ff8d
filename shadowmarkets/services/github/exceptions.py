class GithubAPIError(Exception):
    """Base exception for GitHub API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class GithubAuthError(GithubAPIError):
    """Token rejected or lacks access to the repository."""

    pass


class GithubNotFoundError(GithubAPIError):
    """Repository or issue not found."""

    pass


class GithubRateLimitError(GithubAPIError):
    """Rate limit exceeded."""

    pass
