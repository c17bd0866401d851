import logging
import random
import string
from typing import Any, Dict, List, Optional

from cugini.services.core_service import CoreError
from cugini.services.loyalty.models import EarnCode

log = logging.getLogger("cugini.admin.codes")

CODE_ALPHABET = string.digits + string.ascii_uppercase
DEFAULT_PREFIX = "CUGINI-"
MAX_BATCH = 500
REFRESH_LIMIT = 20


def _suffix(length: int, rng: random.Random) -> str:
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(length))


def generate_codes(
    prefix: str,
    quantity: int,
    points: int,
    rng: Optional[random.Random] = None,
) -> List[Dict[str, Any]]:
    """
    A custom prefix gets 4 random characters appended; without one the code
    is CUGINI- plus 6. Uniqueness is enforced by the table, not here.
    """
    if quantity < 1 or quantity > MAX_BATCH:
        raise CoreError(f"La cantidad debe estar entre 1 y {MAX_BATCH}.", 400, "invalid_quantity")
    if points < 1:
        raise CoreError("Los puntos deben ser mayores a 0.", 400, "invalid_points")

    rng = rng or random.SystemRandom()
    base = (prefix or "").strip()
    rows = []
    for _ in range(quantity):
        code = f"{base}{_suffix(4, rng)}" if base else f"{DEFAULT_PREFIX}{_suffix(6, rng)}"
        rows.append({"code": code, "points": int(points), "is_claimed": False})
    return rows


def list_codes(sb, limit: Optional[int] = None) -> List[EarnCode]:
    q = sb.table("earn_codes").select("*").order("created_at", desc=True)
    if limit:
        q = q.limit(limit)
    try:
        rows = q.execute().data or []
    except Exception as e:
        log.error(f"[CODES] list failed: {e}")
        raise CoreError("No fue posible cargar los códigos.", 502, "supabase_error")
    return [EarnCode.from_row(r) for r in rows if isinstance(r, dict)]


def create_codes(sb, prefix: str, quantity: int, points: int, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    rows = generate_codes(prefix, quantity, points, rng)
    try:
        sb.table("earn_codes").insert(rows).execute()
    except Exception as e:
        log.error(f"[CODES] insert of {len(rows)} failed: {e}")
        raise CoreError("No se pudo crear el/los códigos.", 502, "supabase_error")

    log.info(f"[CODES] created {len(rows)} code(s) worth {points} pts")
    return {
        "message": f"Se crearon {len(rows)} código(s).",
        "created": [r["code"] for r in rows],
        "latest": [c.to_dict() for c in list_codes(sb, limit=REFRESH_LIMIT)],
    }
