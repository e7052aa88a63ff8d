"""ShadowMarkets: prediction markets created and settled from private events."""

__version__ = "0.1.0"
__author__ = "ShadowMarkets Team"

__all__ = ["__version__", "__author__"]
