from pydantic import BaseModel


class GatewayConfig(BaseModel):
    """Configuration for the signing gateway client."""

    base_url: str = "http://localhost:8787"
    timeout_seconds: float = 30.0
    max_retries: int = 3
