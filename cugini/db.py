import logging
from typing import Optional

from supabase import Client, ClientOptions, create_client

from cugini.config.settings import settings

log = logging.getLogger("cugini.db")


def get_supabase() -> Optional[Client]:
    """
    Service-role client. Only for auth admin calls and health checks;
    customer and admin data go through get_user_supabase so RLS applies.
    """
    if not (settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY):
        return None
    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        log.error(f"[DB] service client unavailable: {e}")
        return None


def get_anon_supabase() -> Optional[Client]:
    if not (settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY):
        return None
    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    except Exception as e:
        log.error(f"[DB] anon client unavailable: {e}")
        return None


def get_user_supabase(access_token: str) -> Optional[Client]:
    """
    Anon-key client acting as the signed-in user: tables, RPCs and storage
    all see the caller's JWT, so auth.uid() resolves inside the stored procedures.
    """
    if not (settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY):
        return None
    try:
        return create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            options=ClientOptions(headers={"Authorization": f"Bearer {access_token}"}),
        )
    except Exception as e:
        log.error(f"[DB] user client unavailable: {e}")
        return None
