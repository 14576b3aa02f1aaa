"""Schema Upgrade Hook — brings the on-disk schema to the head revision at open time.

Invariants:
    - Runs on the connection the store is opening with (same transaction)
    - Only upgrades: no downgrade path is ever taken automatically
    - Revisions after 001_initial_cache are additive (new tables/columns/indexes only)

Design Decisions:
    - alembic as the versioned upgrade hook: version lives in alembic_version,
      same revisions serve the operator CLI (ADR: one migration history)
    - Migrations shipped inside the package (appcache/migrations) so an
      installed cache can upgrade itself without an alembic.ini on disk
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Connection

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "migrations"


def alembic_config(connection: Connection | None = None) -> Config:
    """Programmatic alembic config pointing at the packaged migrations."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    if connection is not None:
        cfg.attributes["connection"] = connection
    return cfg


def head_revision() -> str | None:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


def current_revision(connection: Connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


def upgrade_schema(connection: Connection) -> tuple[str | None, str | None]:
    """Upgrade to head if behind. Returns (old_revision, new_revision)."""
    old = current_revision(connection)
    head = head_revision()
    if old == head:
        return old, head
    command.upgrade(alembic_config(connection), "head")
    logger.info(f"Cache schema upgraded from {old or 'empty'} to {head}")
    return old, head
