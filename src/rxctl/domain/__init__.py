"""Domain layer — records, refill chains, and due-date rules.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
