from fastapi import APIRouter
from fastapi.responses import JSONResponse

from cugini.db import get_supabase
from cugini.services.rewards_service import REWARDS_TABLE

router = APIRouter(prefix="/health", tags=["health"])

CHECKED_TABLES = (
    "profiles",
    "user_points",
    "point_transactions",
    "earn_codes",
    "announcements",
    REWARDS_TABLE,
)


def supabase_checks(sb) -> dict:
    checks = {}
    for table in CHECKED_TABLES:
        try:
            sb.table(table).select("*").limit(1).execute()
            checks[table] = True
        except Exception:
            checks[table] = False
    return {"ok": all(checks.values()), "checks": checks}


@router.get("")
def health_root():
    return {"ok": True}


@router.get("/supabase")
def health_supabase():
    sb = get_supabase()
    if not sb:
        return JSONResponse(status_code=503, content={"ok": False, "error": "Supabase not configured"})
    res = supabase_checks(sb)
    return JSONResponse(content=res, status_code=200 if res["ok"] else 503)
