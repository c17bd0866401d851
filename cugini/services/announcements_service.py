import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from cugini.services.core_service import CoreError
from cugini.services.loyalty.models import Announcement, parse_timestamp

log = logging.getLogger("cugini.announcements")

ANNOUNCEMENT_COLUMNS = "id,title,message,link_url,is_active,starts_at,ends_at,created_at"
CUSTOMER_LIMIT = 5
ADMIN_LIMIT = 50


def list_active_announcements(
    sb,
    *,
    now: Optional[datetime] = None,
    limit: int = CUSTOMER_LIMIT,
) -> List[Announcement]:
    """
    Active announcements whose validity window contains `now`, newest start first.
    """
    now = now or datetime.now(timezone.utc)
    try:
        rows = (
            sb.table("announcements")
            .select(ANNOUNCEMENT_COLUMNS)
            .eq("is_active", True)
            .order("starts_at", desc=True, nullsfirst=False)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
            .data
        ) or []
    except Exception as e:
        log.error(f"[ANNOUNCEMENTS] list failed: {e}")
        raise CoreError("No fue posible cargar los avisos.", 502, "supabase_error")

    items = [Announcement.from_row(r) for r in rows if isinstance(r, dict)]
    return [a for a in items if a.in_window(now)]


def list_announcements(sb, limit: int = ADMIN_LIMIT) -> List[Announcement]:
    try:
        rows = (
            sb.table("announcements")
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
            .data
        ) or []
    except Exception as e:
        log.error(f"[ANNOUNCEMENTS] admin list failed: {e}")
        raise CoreError("No se pudieron cargar los avisos.", 502, "supabase_error")
    return [Announcement.from_row(r) for r in rows if isinstance(r, dict)]


def _iso(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    dt = parse_timestamp(value)
    if dt is None:
        raise CoreError(f"Fecha inválida: {value}", 400, "invalid_date")
    return dt.isoformat()


def create_announcement(
    sb,
    *,
    created_by: Optional[str],
    message: str,
    title: Optional[str] = None,
    link_url: Optional[str] = None,
    is_active: bool = True,
    starts_at: Optional[str] = None,
    ends_at: Optional[str] = None,
) -> Dict[str, Any]:
    if not (message or "").strip():
        raise CoreError("El mensaje no puede estar vacío.", 400, "empty_message")

    payload = {
        "title": (title or "").strip() or None,
        "message": message.strip(),
        "link_url": (link_url or "").strip() or None,
        "is_active": bool(is_active),
        "starts_at": _iso(starts_at),
        "ends_at": _iso(ends_at),
        "created_by": created_by,
    }
    try:
        res = sb.table("announcements").insert(payload).execute()
    except Exception as e:
        log.error(f"[ANNOUNCEMENTS] create failed: {e}")
        raise CoreError("Error al crear aviso.", 502, "supabase_error")
    return (res.data or [payload])[0]


def set_announcement_active(sb, announcement_id: int, is_active: bool) -> None:
    try:
        sb.table("announcements").update({"is_active": bool(is_active)}).eq("id", announcement_id).execute()
    except Exception as e:
        log.error(f"[ANNOUNCEMENTS] toggle {announcement_id} failed: {e}")
        raise CoreError("No se pudo actualizar el aviso.", 502, "supabase_error")
