from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cugini.services import redemption_service
from cugini.services.core_service import UserContext, require_user_context
from cugini.services.loyalty.redemption_planner import PlannerState
from cugini.utils.envelope import error, ok

router = APIRouter(prefix="/redeem", tags=["redeem"])


class CartIn(BaseModel):
    quantities: Dict[int, int] = Field(default_factory=dict, description="reward id -> units")


class CartChangeIn(CartIn):
    reward_id: int


@router.get("/catalog")
def redeem_catalog(ctx: UserContext = Depends(require_user_context)):
    return ok(redemption_service.catalog(ctx))


@router.post("/cart/increment")
def cart_increment(inb: CartChangeIn, ctx: UserContext = Depends(require_user_context)):
    return ok(redemption_service.change_quantity(ctx, inb.quantities, inb.reward_id, +1))


@router.post("/cart/decrement")
def cart_decrement(inb: CartChangeIn, ctx: UserContext = Depends(require_user_context)):
    return ok(redemption_service.change_quantity(ctx, inb.quantities, inb.reward_id, -1))


@router.post("/preview")
def cart_preview(inb: CartIn, ctx: UserContext = Depends(require_user_context)):
    return ok(redemption_service.preview(ctx, inb.quantities))


@router.post("")
def redeem_selected(inb: CartIn, ctx: UserContext = Depends(require_user_context)):
    result = redemption_service.redeem_selection(ctx, inb.quantities)
    if result.state == PlannerState.ABORTED_NO_CHANGE:
        status = 409 if result.failure == "insufficient_points" else 502
        return error(result.message or "Error al canjear.", result.failure or "redeem_failed", status, result.to_dict())
    return ok(result.to_dict())


@router.get("/confirmation")
def redeem_confirmation(code: str = "", reward: str = "", ctx: UserContext = Depends(require_user_context)):
    return ok(redemption_service.confirmation(ctx, code, reward))
