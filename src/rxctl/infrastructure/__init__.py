"""Infrastructure layer — database, ledger, record store, seed data.

This layer depends on stdlib, third-party libs (SQLAlchemy), and the
domain models it hydrates. It must never import from services,
commands, or output.
"""
