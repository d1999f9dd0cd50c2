"""Reconnecting WebSocket messaging and the TSS cold-wallet enrollment client."""

__version__ = "0.1.0"

__all__ = ["__version__"]
