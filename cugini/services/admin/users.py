from typing import Any, Dict, List

from cugini.services.core_service import CoreError

# SQL view joining auth users, profiles and balances
APP_USERS_VIEW = "admin_app_users"


def list_app_users(sb) -> List[Dict[str, Any]]:
    try:
        rows = sb.table(APP_USERS_VIEW).select("*").order("created_at", desc=True).execute().data or []
    except Exception as e:
        raise CoreError(f"Error consultando usuarios: {e}", 502, "supabase_error")

    return [
        {
            "id": r.get("id"),
            "email": r.get("email"),
            "full_name": r.get("full_name"),
            "phone": r.get("phone"),
            "points": r.get("points") or 0,
            "created_at": r.get("created_at"),
        }
        for r in rows
        if isinstance(r, dict)
    ]
