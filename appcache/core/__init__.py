"""Core Layer — pure cache logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/, or db/
    - All functions are pure and deterministic (the clock is injected)

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
