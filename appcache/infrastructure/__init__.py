"""Infrastructure Layer — storage adapter, schema upgrades and logging.

Invariants:
    - Every engine failure is mapped to core/errors.py types
    - No retries or timeouts are added here

Design Decisions:
    - Adapters implement core protocols (ADR: dependency arrows point inward)
"""
