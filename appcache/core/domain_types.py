"""Domain Types — rich types that replace bare strings across the cache.

Invariants:
    - ScopeKey is always produced by scope_key.scope_key (never built by hand)
    - RecordKey is always "{scope}:{app_id}"
    - Partition enumerates exactly the two persisted partitions

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enum for Partition: value doubles as the table name (ADR: one name per partition)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ScopeKey = NewType("ScopeKey", str)     # "{tenant}:{user_id}"
RecordKey = NewType("RecordKey", str)   # "{scope}:{app_id}"
AppId = NewType("AppId", str)


# ─── Value Types ─────────────────────────────────────────────────

EpochMillis = NewType("EpochMillis", int)


# ─── Constants ───────────────────────────────────────────────────

DEFAULT_MAX_AGE_MS = 24 * 60 * 60 * 1000
SCOPE_SEPARATOR = ":"


# ─── Enums ───────────────────────────────────────────────────────

class Partition(str, Enum):
    """Named partitions of the persistent store; values are table names."""
    RECORDS = "cached_apps"
    METADATA = "cache_metadata"
