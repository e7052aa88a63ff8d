from .exceptions import ActivationError, MarketUnrecoverableError
from .main import LiquidityAgent
from .models import ActivationResult

__all__ = [
    "ActivationError",
    "MarketUnrecoverableError",
    "LiquidityAgent",
    "ActivationResult",
]
