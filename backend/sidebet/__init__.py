"""SideBet: balances and notification dispatch for friendly group wagers."""

__version__ = "0.1.0"
__author__ = "SideBet Team"

__all__ = ["__version__", "__author__"]
