from pydantic import BaseModel


class GithubConfig(BaseModel):
    """Configuration for the GitHub REST client."""

    base_url: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    timeout_seconds: float = 30.0
    max_retries: int = 3
