"""CachedApp ORM — records partition: one row per (scope, app id).

Invariants:
    - cache_key is "{tenant_user}:{app_id}" and is the primary key
    - tenant_user is indexed: all rows of a scope are fetched by it
    - data is stored as-is (JSON), never inspected
    - cached_at is epoch milliseconds, set by the writer

Design Decisions:
    - Composite string key instead of a two-column primary key: one upsert
      target per record (ADR: key-value semantics over relational ones)
    - updated_at kept as String: remote timestamps are compared, never parsed
"""

from typing import Any

from sqlalchemy import BigInteger, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from appcache.db.base import Base


class CachedApp(Base):
    """Cached copy of one remote app."""
    __tablename__ = "cached_apps"

    cache_key: Mapped[str] = mapped_column(String(1024), primary_key=True)
    tenant_user: Mapped[str] = mapped_column(
        String(512), nullable=False, index=True,
    )
    app_id: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True,
    )
    name: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    data: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[str | None] = mapped_column(String(64), nullable=True)
    cached_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    space_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
