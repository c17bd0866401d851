import logging
from typing import Any, Dict, List, Optional, Sequence

from cugini.flags import SETTINGS
from cugini.services.announcements_service import list_active_announcements
from cugini.services.core_service import CoreError, UserContext
from cugini.services.loyalty.models import PointBalance, PointTransaction
from cugini.services.loyalty.progress import GOALS, compute_progress
from cugini.services.loyalty.tiers import next_tier, resolve_tier

log = logging.getLogger("cugini.points")

RECENT_TRANSACTIONS = 15


def get_point_balance(sb, user_id: str) -> Optional[PointBalance]:
    """
    The user's `user_points` row, or None when the user has none yet.
    """
    res = sb.table("user_points").select("*").eq("user_id", user_id).maybe_single().execute()
    data = getattr(res, "data", None)
    if isinstance(data, list):
        data = data[0] if data else None
    if not data:
        return None
    return PointBalance.from_row(data)


def fetch_balance(sb, user_id: str) -> PointBalance:
    try:
        row = get_point_balance(sb, user_id)
    except Exception as e:
        log.error(f"[POINTS] balance read failed for {user_id}: {e}")
        raise CoreError("No fue posible cargar tus puntos.", 502, "supabase_error")
    return row or PointBalance(balance=0)


def fetch_transactions(sb, user_id: str, limit: int = RECENT_TRANSACTIONS) -> List[PointTransaction]:
    try:
        rows = (
            sb.table("point_transactions")
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
            .data
        ) or []
    except Exception as e:
        log.error(f"[POINTS] transactions read failed for {user_id}: {e}")
        raise CoreError("No fue posible cargar tus movimientos.", 502, "supabase_error")
    return [PointTransaction.from_row(r) for r in rows if isinstance(r, dict)]


def earned_from_transactions(transactions: Sequence[PointTransaction]) -> int:
    return sum(max(0, t.amount) for t in transactions)


def dashboard(
    ctx: UserContext,
    *,
    use_net_for_goals: Optional[bool] = None,
    goals: Sequence[int] = GOALS,
) -> Dict[str, Any]:
    """
    Balance, tier and progress for the signed-in customer.

    Lifetime points come from `total_earned` when the backend keeps it,
    otherwise from the positive movements among the recent transactions.
    """
    if use_net_for_goals is None:
        use_net_for_goals = SETTINGS["use_net_for_goals"]

    balance = fetch_balance(ctx.sb, ctx.identity.id)
    transactions = fetch_transactions(ctx.sb, ctx.identity.id)

    total_earned = balance.total_earned
    if total_earned is None:
        total_earned = earned_from_transactions(transactions)

    tier = resolve_tier(total_earned)
    upcoming = next_tier(total_earned)
    progress_base = balance.balance if use_net_for_goals else total_earned
    progress = compute_progress(progress_base, goals)

    try:
        announcements = [a.to_dict() for a in list_active_announcements(ctx.sb)]
    except CoreError as e:
        # the banner is optional; points still render
        log.warning(f"[POINTS] announcements unavailable: {e.message}")
        announcements = []

    return {
        "email": ctx.identity.email,
        "balance": balance.balance,
        "total_earned": total_earned,
        "tier": tier.to_dict(),
        "next_tier": None
        if upcoming is None
        else {**upcoming.to_dict(), "remain": upcoming.min - total_earned},
        "progress": progress.to_dict(),
        "progress_mode": "net" if use_net_for_goals else "lifetime",
        "transactions": [t.to_dict() for t in transactions],
        "announcements": announcements,
    }
