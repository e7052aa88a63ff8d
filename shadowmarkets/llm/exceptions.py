class LlmError(Exception):
    """LLM oracle call failed (network, HTTP status or unusable response)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LlmResponseError(LlmError):
    """Response arrived but did not contain a valid decision."""

    pass
