class ChainError(Exception):
    """Base exception for market program / gateway failures."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ChainAuthError(ChainError):
    """Gateway rejected the API key."""

    pass


class ChainNotFoundError(ChainError):
    """Market account not found."""

    pass


class InsufficientCollateralError(ChainError):
    """Operator wallet cannot cover the liquidity or trade amount."""

    pass


class ChainRejectedError(ChainError):
    """Program rejected the instruction (already resolved, not resolvable, bad params)."""

    pass
