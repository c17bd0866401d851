import logging
import re
import time
from typing import Any, Dict, Optional

from cugini.db import get_supabase
from cugini.services.core_service import CoreError, UserContext

log = logging.getLogger("cugini.profile")

PROFILE_COLUMNS = "full_name, phone, favorite_pizza, preferred_time, birthday, avatar_url"
AVATARS_BUCKET = "avatars"

MSG_SAVED = "Cambios guardados correctamente."
MSG_SAVED_METADATA_LAGGING = (
    "Cambios guardados. (Nota: el panel admin puede demorar en reflejar el nombre)."
)


def normalize_phone(raw: str) -> str:
    """
    Chilean mobile numbers to +569XXXXXXXX. Input that doesn't look like
    one is returned trimmed, unchanged.
    """
    digits = re.sub(r"\D", "", raw or "")
    if digits.startswith("569") and len(digits) >= 11:
        return f"+{digits[:11]}"
    if digits.startswith("9") and len(digits) >= 9:
        return f"+56{digits[:9]}"
    return (raw or "").strip()


def is_profile_complete(profile: Dict[str, Any]) -> bool:
    return bool((profile.get("full_name") or "").strip()) and bool((profile.get("phone") or "").strip())


def get_profile(ctx: UserContext) -> Dict[str, Any]:
    """
    Profile row, falling back to auth metadata for name and phone
    (sign-up stores them there before any profile row exists).
    """
    try:
        res = (
            ctx.sb.table("profiles")
            .select(PROFILE_COLUMNS)
            .eq("user_id", ctx.identity.id)
            .maybe_single()
            .execute()
        )
    except Exception as e:
        log.error(f"[PROFILE] read failed for {ctx.identity.id}: {e}")
        raise CoreError("No fue posible cargar tu perfil.", 502, "supabase_error")

    prof = getattr(res, "data", None) or {}
    meta = ctx.identity.metadata or {}

    return {
        "email": ctx.identity.email,
        "full_name": prof.get("full_name") or meta.get("full_name") or "",
        "phone": prof.get("phone") or meta.get("phone") or "",
        "favorite_pizza": prof.get("favorite_pizza") or "",
        "preferred_time": prof.get("preferred_time") or "",
        "birthday": prof.get("birthday") or "",
        "avatar_url": prof.get("avatar_url"),
    }


def _sync_auth_metadata(ctx: UserContext, update: Dict[str, Any]) -> bool:
    admin = get_supabase()
    if not admin:
        log.warning("[PROFILE] service client unavailable, metadata not synced")
        return False
    try:
        admin.auth.admin.update_user_by_id(
            ctx.identity.id,
            {"user_metadata": {**(ctx.identity.metadata or {}), **update}},
        )
    except Exception as e:
        log.warning(f"[PROFILE] metadata sync failed for {ctx.identity.id}: {e}")
        return False
    return True


def save_profile(
    ctx: UserContext,
    *,
    full_name: str,
    phone: str,
    favorite_pizza: Optional[str] = None,
    preferred_time: Optional[str] = None,
    birthday: Optional[str] = None,
    avatar_url: Optional[str] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "user_id": ctx.identity.id,
        "full_name": (full_name or "").strip(),
        "phone": normalize_phone((phone or "").strip()),
        "favorite_pizza": (favorite_pizza or "").strip() or None,
        "preferred_time": (preferred_time or "").strip() or None,
        "birthday": birthday or None,
    }
    if avatar_url:
        payload["avatar_url"] = avatar_url

    try:
        ctx.sb.table("profiles").upsert(payload, on_conflict="user_id").execute()
    except Exception as e:
        log.error(f"[PROFILE] save failed for {ctx.identity.id}: {e}")
        raise CoreError("Error al guardar.", 502, "supabase_error")

    # admin user listing reads name and phone from auth metadata
    meta_update: Dict[str, Any] = {
        "full_name": payload["full_name"] or None,
        "phone": payload["phone"] or None,
    }
    if avatar_url:
        meta_update["avatar_url"] = avatar_url

    synced = _sync_auth_metadata(ctx, meta_update)
    return {
        "profile": payload,
        "message": MSG_SAVED if synced else MSG_SAVED_METADATA_LAGGING,
    }


def upload_avatar(ctx: UserContext, content: bytes, *, now_ms: Optional[int] = None) -> str:
    if not content:
        raise CoreError("La imagen está vacía.", 400, "empty_file")

    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    path = f"{ctx.identity.id}-{stamp}.jpg"
    bucket = ctx.sb.storage.from_(AVATARS_BUCKET)
    try:
        bucket.upload(path, content, {"content-type": "image/jpeg", "upsert": "true"})
    except Exception as e:
        log.error(f"[PROFILE] avatar upload failed ({path}): {e}")
        raise CoreError('No se pudo subir la imagen. Revisa permisos del bucket "avatars".', 502, "storage_error")
    return bucket.get_public_url(path)
