"""Database Infrastructure — SQLAlchemy Base and async session factory.

Invariants:
    - All sessions are async (AsyncSession)
    - One engine per SqlPartitionedStore instance (opened lazily)

Design Decisions:
    - aiosqlite driver by default (ADR: client-side cache, no server to run)
"""
