"""Market lifecycle agents: creation, liquidity activation and settlement."""
