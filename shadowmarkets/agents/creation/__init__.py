from .main import MarketCreationAgent

__all__ = ["MarketCreationAgent"]
