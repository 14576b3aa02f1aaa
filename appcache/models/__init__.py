"""ORM Models — SQLAlchemy declarative models for the two cache partitions.

Invariants:
    - All models inherit from Base (db/base.py)
    - Table names equal Partition values (core/domain_types.py)

Design Decisions:
    - One file per partition for locality
    - All models imported here so Base.metadata is complete before migrations run
"""

from appcache.models.cached_app import CachedApp  # noqa: F401
from appcache.models.cache_metadata import CacheMetadata  # noqa: F401
