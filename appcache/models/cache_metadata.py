"""CacheMetadata ORM — metadata partition: one row per scope.

Invariants:
    - key is the scope ("{tenant}:{user_id}")
    - Rows are overwritten wholesale on each sync, never merged
"""

from sqlalchemy import BigInteger, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from appcache.db.base import Base


class CacheMetadata(Base):
    """Sync bookkeeping for one scope."""
    __tablename__ = "cache_metadata"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    last_sync_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    app_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
