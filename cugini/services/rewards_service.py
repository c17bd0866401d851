import logging
import re
import time
from typing import Any, Dict, List, Optional

from cugini.services.core_service import CoreError
from cugini.services.loyalty.models import Reward

log = logging.getLogger("cugini.rewards")

# historic table name, kept as deployed
REWARDS_TABLE = "revisión"
REWARD_IMAGES_BUCKET = "cugini-images"
IMAGE_EXT_PATTERN = re.compile(r"[a-z0-9]{1,5}")
DEFAULT_IMAGE_EXT = "jpg"


def list_rewards(sb, *, active_only: bool = False) -> List[Reward]:
    try:
        rows = (
            sb.table(REWARDS_TABLE)
            .select("*")
            .order("points_cost", desc=False)
            .execute()
            .data
        ) or []
    except Exception as e:
        log.error(f"[REWARDS] list failed: {e}")
        raise CoreError("No fue posible cargar los premios.", 502, "supabase_error")

    rewards = [Reward.from_row(r) for r in rows if isinstance(r, dict)]
    if active_only:
        rewards = [r for r in rewards if r.is_active]
    return rewards


def _validate(name: str, points_cost: int) -> str:
    name = (name or "").strip()
    if not name:
        raise CoreError("El premio necesita un nombre.", 400, "invalid_reward")
    if int(points_cost) <= 0:
        raise CoreError("El costo en puntos debe ser mayor a 0.", 400, "invalid_reward")
    return name


def create_reward(
    sb,
    *,
    name: str,
    points_cost: int,
    description: Optional[str] = None,
    image_url: Optional[str] = None,
) -> Dict[str, Any]:
    payload = {
        "name": _validate(name, points_cost),
        "description": (description or "").strip() or None,
        "points_cost": int(points_cost),
        "is_active": True,
        "image_url": image_url,
    }
    try:
        res = sb.table(REWARDS_TABLE).insert(payload).execute()
    except Exception as e:
        log.error(f"[REWARDS] create failed: {e}")
        raise CoreError("No se pudo crear el premio.", 502, "supabase_error")
    return (res.data or [payload])[0]


def update_reward(
    sb,
    reward_id: int,
    *,
    name: str,
    points_cost: int,
    description: Optional[str] = None,
    image_url: Optional[str] = None,
) -> None:
    """
    Editing reactivates the reward; the image is only replaced when a new one is given.
    """
    patch: Dict[str, Any] = {
        "name": _validate(name, points_cost),
        "description": (description or "").strip() or None,
        "points_cost": int(points_cost),
        "is_active": True,
    }
    if image_url:
        patch["image_url"] = image_url

    try:
        sb.table(REWARDS_TABLE).update(patch).eq("id", reward_id).execute()
    except Exception as e:
        log.error(f"[REWARDS] update {reward_id} failed: {e}")
        raise CoreError("No se pudo actualizar el premio.", 502, "supabase_error")


def set_reward_active(sb, reward_id: int, is_active: bool) -> None:
    try:
        sb.table(REWARDS_TABLE).update({"is_active": bool(is_active)}).eq("id", reward_id).execute()
    except Exception as e:
        log.error(f"[REWARDS] toggle {reward_id} failed: {e}")
        raise CoreError("No se pudo cambiar el estado del premio.", 502, "supabase_error")


def _image_extension(filename: str) -> str:
    # the name comes from the client; only a plain alphanumeric extension reaches the storage path
    ext = (filename or "").rsplit(".", 1)[-1].lower() if "." in (filename or "") else ""
    return ext if IMAGE_EXT_PATTERN.fullmatch(ext) else DEFAULT_IMAGE_EXT


def upload_reward_image(
    sb,
    filename: str,
    content: bytes,
    content_type: str = "application/octet-stream",
    *,
    now_ms: Optional[int] = None,
) -> str:
    if not content:
        raise CoreError("La imagen está vacía.", 400, "empty_file")

    ext = _image_extension(filename)
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    path = f"rewards/reward-{stamp}.{ext}"

    bucket = sb.storage.from_(REWARD_IMAGES_BUCKET)
    try:
        bucket.upload(path, content, {"content-type": content_type, "upsert": "false"})
    except Exception as e:
        log.error(f"[REWARDS] image upload failed ({path}): {e}")
        raise CoreError("Error al subir la imagen del premio.", 502, "storage_error")
    return bucket.get_public_url(path)
