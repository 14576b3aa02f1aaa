"""Pydantic Schemas — validation of external input at the cache boundary.

Invariants:
    - Schemas validate data handed in by collaborators (remote app listings)
    - Unknown fields are preserved, never dropped

Design Decisions:
    - Separate from core records: schemas are input contracts, records are cached state (ADR: DDD boundary)
"""
