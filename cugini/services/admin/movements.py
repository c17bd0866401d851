import logging
from typing import List, Sequence

from cugini.services.core_service import CoreError
from cugini.services.loyalty.models import PointTransaction

log = logging.getLogger("cugini.admin.movements")

KINDS = ("all", "earn", "redeem")


def fetch_movements(sb) -> List[PointTransaction]:
    try:
        res = sb.rpc("get_admin_point_transactions", {}).execute()
    except Exception as e:
        log.error(f"[MOVEMENTS] rpc failed: {e}")
        raise CoreError("No fue posible cargar los movimientos.", 502, "supabase_error")
    rows = getattr(res, "data", None) or []
    return [PointTransaction.from_row(r) for r in rows if isinstance(r, dict)]


def filter_movements(movements: Sequence[PointTransaction], kind: str = "all") -> List[PointTransaction]:
    kind = (kind or "all").lower()
    if kind not in KINDS:
        raise CoreError(f"Filtro inválido: {kind}", 400, "invalid_filter")
    if kind == "all":
        return list(movements)
    return [m for m in movements if m.kind == kind.upper()]
