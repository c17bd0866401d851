import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

from cugini.config.settings import settings
from cugini.services.core_service import CoreError, UserContext
from cugini.services.loyalty.redemption_planner import (
    RedemptionCart,
    RedemptionPlanner,
    RedemptionResult,
)
from cugini.services.points_service import fetch_balance, get_point_balance
from cugini.services.profile_service import get_profile, is_profile_complete
from cugini.services.rewards_service import list_rewards

log = logging.getLogger("cugini.redeem")


class SupabaseRedemptionGateway:
    def __init__(self, sb, user_id: str) -> None:
        self.sb = sb
        self.user_id = user_id

    def redeem_unit(self, reward_id: int) -> Any:
        res = self.sb.rpc("redeem_reward", {"p_reward_id": reward_id}).execute()
        return getattr(res, "data", None)

    def fetch_balance(self) -> Optional[int]:
        row = get_point_balance(self.sb, self.user_id)
        return None if row is None else row.balance


def load_cart(ctx: UserContext, quantities: Optional[Mapping[int, int]] = None) -> RedemptionCart:
    rewards = list_rewards(ctx.sb, active_only=True)
    balance = fetch_balance(ctx.sb, ctx.identity.id)
    return RedemptionCart.from_quantities(rewards, balance.balance, quantities or {})


def catalog(ctx: UserContext) -> Dict[str, Any]:
    cart = load_cart(ctx)
    return {
        "balance": cart.balance,
        "rewards": [r.to_dict() for r in cart.rewards],
    }


def change_quantity(ctx: UserContext, quantities: Mapping[int, int], reward_id: int, step: int) -> Dict[str, Any]:
    cart = load_cart(ctx, quantities)
    if step > 0:
        cart.increment(reward_id)
    else:
        cart.decrement(reward_id)
    return cart.to_dict()


def preview(ctx: UserContext, quantities: Mapping[int, int]) -> Dict[str, Any]:
    return load_cart(ctx, quantities).to_dict()


def redeem_selection(ctx: UserContext, quantities: Mapping[int, int]) -> RedemptionResult:
    cart = load_cart(ctx, quantities)
    planner = RedemptionPlanner(cart, SupabaseRedemptionGateway(ctx.sb, ctx.identity.id))
    result = planner.submit()
    log.info(
        f"[REDEEM] user={ctx.identity.id} state={result.state.value} "
        f"units={result.units_redeemed}/{planner.unit_count}"
    )
    return result


def confirmation(ctx: UserContext, code: str, reward: str = "") -> Dict[str, Any]:
    """
    Hand-off to the store after a redemption: the customer sends the code
    over WhatsApp. Requires name and phone so the store knows who is coming.
    """
    profile = get_profile(ctx)
    if not is_profile_complete(profile):
        raise CoreError(
            "Completa tu nombre y teléfono en tu perfil para retirar tu premio.",
            409,
            "profile_incomplete",
        )

    code = (code or "").strip() or "—"
    full_name = profile["full_name"].strip()
    phone = profile["phone"].strip()
    email = ctx.identity.email

    lines = [
        "Hola, acabo de canjear en la app Cugini.",
        f"Código: {code}",
        f"Premio(s): {reward or '—'}",
        f"Nombre: {full_name}" if full_name else "",
        f"Teléfono: {phone}" if phone else "",
        f"Correo: {email}" if email else "",
    ]
    text = "\n".join(x for x in lines if x)

    copy_parts = [
        f"Código: {code}",
        f"Premio(s): {reward}" if reward else "",
        f"Nombre: {full_name}" if full_name else "",
        f"Teléfono: {phone}" if phone else "",
        f"Correo: {email}" if email else "",
    ]

    return {
        "code": code,
        "reward": reward,
        "whatsapp_url": f"https://wa.me/{settings.STORE_WHATSAPP}?text={quote(text, safe='')}",
        "copy_text": " | ".join(x for x in copy_parts if x),
    }
