"""Scope Keys — derive and parse the tenant+user scope used to partition cached state.

Invariants:
    - Tenant normalization strips http(s)://, one trailing slash, and lower-cases
    - User ids and app ids are never normalized
    - Distinct (scope, app id) pairs always yield distinct RecordKeys
    - Same (tenant, user) pair always yields the same ScopeKey

Design Decisions:
    - Pure functions, no IO (ADR: functional core)
    - split_scope_key splits on the LAST separator: tenants may carry a port
      ("host:8443"), user ids are assumed separator-free
    - record_key escapes "%" and ":" in the app id only, so the last separator
      of a RecordKey always ends the scope; ordinary ids stay verbatim
"""

import re

from appcache.core.domain_types import (
    ScopeKey, RecordKey, SCOPE_SEPARATOR,
)

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def normalize_tenant_url(tenant_url: str) -> str:
    """Strip scheme and trailing slash, lower-case. Pure."""
    tenant = _SCHEME.sub("", tenant_url)
    if tenant.endswith("/"):
        tenant = tenant[:-1]
    return tenant.lower()


def scope_key(tenant_url: str, user_id: str) -> ScopeKey:
    """Build the scope for a tenant URL and user id."""
    return ScopeKey(
        f"{normalize_tenant_url(tenant_url)}{SCOPE_SEPARATOR}{user_id}",
    )


def _escape_app_id(app_id: str) -> str:
    return app_id.replace("%", "%25").replace(SCOPE_SEPARATOR, "%3A")


def record_key(scope: ScopeKey, app_id: str) -> RecordKey:
    """Composite primary key of a cached app record."""
    return RecordKey(f"{scope}{SCOPE_SEPARATOR}{_escape_app_id(app_id)}")


def split_scope_key(scope: str) -> tuple[str, str]:
    """Split a scope back into (tenant, user_id)."""
    tenant, _, user_id = scope.rpartition(SCOPE_SEPARATOR)
    return tenant, user_id
