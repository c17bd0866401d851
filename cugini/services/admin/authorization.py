"""
Admin authorization
===================

Three historical ways of marking an administrator, any one of which grants
access:
- the e-mail is on the configured allow-list,
- the auth app_metadata carries `is_admin` or `role: admin`,
- an administrators record exists (`admin_users` row or `profiles.is_admin`).

Checks run cheapest first and stop at the first grant. A lookup that fails
counts as "not an admin".
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol, Sequence

from fastapi import Depends

from cugini.config.settings import settings
from cugini.services.core_service import CoreError, Identity, UserContext, require_user_context

log = logging.getLogger("cugini.admin")

MSG_NOT_ADMIN = "Tu cuenta no tiene permisos de administrador."


class AuthorizationProvider(Protocol):
    def is_admin(self, identity: Identity) -> bool: ...


class AllowListAuthorization:
    def __init__(self, emails: Iterable[str]) -> None:
        self.emails = {e.lower().strip() for e in emails if e and e.strip()}

    def is_admin(self, identity: Identity) -> bool:
        return (identity.email or "").lower().strip() in self.emails


class MetadataAuthorization:
    """
    Reads app_metadata only. user_metadata is writable by the user through
    auth.update_user, so a flag there grants nothing.
    """

    def is_admin(self, identity: Identity) -> bool:
        meta = identity.app_metadata or {}
        return bool(meta.get("is_admin")) or meta.get("role") == "admin"


class AdminRecordAuthorization:
    def __init__(self, sb) -> None:
        self.sb = sb

    def _lookup(self, table: str, columns: str, user_id: str):
        res = self.sb.table(table).select(columns).eq("user_id", user_id).maybe_single().execute()
        return getattr(res, "data", None)

    def is_admin(self, identity: Identity) -> bool:
        try:
            if self._lookup("admin_users", "*", identity.id):
                return True
            profile = self._lookup("profiles", "is_admin", identity.id) or {}
            return bool(profile.get("is_admin"))
        except Exception as e:
            log.warning(f"[ADMIN] record lookup failed for {identity.id}: {e}")
            return False


class CompositeAuthorization:
    def __init__(self, providers: Sequence[AuthorizationProvider]) -> None:
        self.providers = list(providers)

    def is_admin(self, identity: Identity) -> bool:
        return any(p.is_admin(identity) for p in self.providers)


def default_authorization(sb, admin_emails: Optional[Iterable[str]] = None) -> CompositeAuthorization:
    return CompositeAuthorization(
        [
            AllowListAuthorization(settings.ADMIN_EMAILS if admin_emails is None else admin_emails),
            MetadataAuthorization(),
            AdminRecordAuthorization(sb),
        ]
    )


def is_admin(ctx: UserContext) -> bool:
    return default_authorization(ctx.sb).is_admin(ctx.identity)


def require_admin_context(ctx: UserContext = Depends(require_user_context)) -> UserContext:
    if not is_admin(ctx):
        log.info(f"[ADMIN] denied for {ctx.identity.id}")
        raise CoreError(MSG_NOT_ADMIN, 403, "not_admin")
    return ctx
