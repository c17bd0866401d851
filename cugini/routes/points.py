from fastapi import APIRouter, Depends

from cugini.services.core_service import UserContext, require_user_context
from cugini.services.points_service import dashboard, fetch_balance, fetch_transactions
from cugini.utils.envelope import ok

router = APIRouter(prefix="/points", tags=["points"])


@router.get("/dashboard")
def points_dashboard(ctx: UserContext = Depends(require_user_context)):
    return ok(dashboard(ctx))


@router.get("/balance")
def points_balance(ctx: UserContext = Depends(require_user_context)):
    balance = fetch_balance(ctx.sb, ctx.identity.id)
    return ok({"balance": balance.balance, "total_earned": balance.total_earned})


@router.get("/transactions")
def points_transactions(ctx: UserContext = Depends(require_user_context)):
    txs = fetch_transactions(ctx.sb, ctx.identity.id)
    return ok([t.to_dict() for t in txs])
