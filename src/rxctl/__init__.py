"""rxctl — prescription fulfillment and refill-chain tracking CLI."""

__version__ = "0.3.0"
