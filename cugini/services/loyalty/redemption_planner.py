"""
Multi-item Redemption Planner
=============================

Purpose:
- Hold a cart of (reward, quantity) selections against a known balance.
- Redeem the cart one unit at a time through the backend's atomic
  `redeem_reward` operation, so each unit succeeds or fails on its own.
- Report full, partial, or no success in user-facing terms.

Rules:
- Guards (empty cart, over budget) run before any remote call.
- Units are redeemed sequentially; the next call depends on the outcome
  and the balance after the previous one.
- The running balance is a display estimate. After every successful unit it
  is replaced by the backend's balance when one can be read.
- Remote calls are never retried: a redeemed unit has already deducted
  points, and nothing here rolls it back.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence
from urllib.parse import quote

from cugini.services.core_service import CoreError
from cugini.services.loyalty.models import Reward

log = logging.getLogger("cugini.redeem")

REDEEM_OK = "OK"

MSG_NOTHING_SELECTED = "No has seleccionado premios."
MSG_UNIT_OVER_BALANCE = "No te alcanzan los puntos para sumar esa unidad."
MSG_NOT_ENOUGH_POINTS = "No tienes puntos suficientes."
MSG_REDEEM_FAILED = "Error al canjear."
MSG_PARTIAL_AFTER_ERROR = "Se canjearon algunos premios antes de que ocurriera un error."
MSG_UNKNOWN_REWARD = "El premio seleccionado no está disponible."

SUCCESS_PATH = "/app/redeem/success"


class RedemptionRejected(CoreError):
    """
    Validation failure caught before any remote call.
    """

    def __init__(self, message: str, code: str = "redeem_rejected"):
        super().__init__(message, 400, code)


class RedemptionGateway(Protocol):
    def redeem_unit(self, reward_id: int) -> Any:
        """Redeem one unit; returns the backend's response value."""

    def fetch_balance(self) -> Optional[int]:
        """Authoritative balance, or None when it cannot be read."""


class PlannerState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    EXECUTING = "executing"
    FULL_SUCCESS = "full_success"
    PARTIAL_SUCCESS = "partial_success"
    ABORTED_NO_CHANGE = "aborted_no_change"


def new_confirmation_code(rng: Optional[random.Random] = None) -> str:
    """
    Reference token shown to the customer and the store. Not a secret.
    """
    r = rng or random
    return f"CUG-{r.randint(100000, 999999)}"


# -----------------------------
# Cart
# -----------------------------
class RedemptionCart:
    """
    Quantities per reward id, in catalog order.
    """

    def __init__(self, rewards: Sequence[Reward], balance: int) -> None:
        self.rewards: List[Reward] = list(rewards)
        self.balance = int(balance)
        self.quantities: Dict[int, int] = {}
        self._by_id = {r.id: r for r in self.rewards}

    @classmethod
    def from_quantities(
        cls,
        rewards: Sequence[Reward],
        balance: int,
        quantities: Mapping[int, int],
    ) -> "RedemptionCart":
        """
        Rebuild a cart the client already assembled. Over-budget carts are
        accepted here and rejected by the planner's pre-submit guard.
        """
        cart = cls(rewards, balance)
        for reward_id, qty in (quantities or {}).items():
            qty = int(qty or 0)
            if qty <= 0:
                continue
            cart._reward(int(reward_id))
            cart.quantities[int(reward_id)] = qty
        return cart

    def _reward(self, reward_id: int) -> Reward:
        reward = self._by_id.get(reward_id)
        if reward is None:
            raise RedemptionRejected(MSG_UNKNOWN_REWARD, "unknown_reward")
        return reward

    @property
    def total_units(self) -> int:
        return sum(q for q in self.quantities.values() if q > 0)

    @property
    def total_cost(self) -> int:
        total = 0
        for r in self.rewards:
            q = self.quantities.get(r.id, 0)
            if q > 0:
                total += r.points_cost * q
        return total

    @property
    def over_limit(self) -> bool:
        return self.total_cost > self.balance

    @property
    def missing_points(self) -> int:
        return max(0, self.total_cost - self.balance)

    def increment(self, reward_id: int) -> int:
        reward = self._reward(reward_id)
        if self.total_cost + reward.points_cost > self.balance:
            raise RedemptionRejected(MSG_UNIT_OVER_BALANCE, "insufficient_points")
        self.quantities[reward_id] = self.quantities.get(reward_id, 0) + 1
        return self.quantities[reward_id]

    def decrement(self, reward_id: int) -> int:
        self._reward(reward_id)
        nxt = max(0, self.quantities.get(reward_id, 0) - 1)
        if nxt == 0:
            self.quantities.pop(reward_id, None)
        else:
            self.quantities[reward_id] = nxt
        return nxt

    def clear(self) -> None:
        self.quantities = {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "balance": self.balance,
            "quantities": dict(self.quantities),
            "total_units": self.total_units,
            "total_cost": self.total_cost,
            "over_limit": self.over_limit,
            "missing_points": self.missing_points,
        }


# -----------------------------
# Result
# -----------------------------
@dataclass
class RedemptionResult:
    state: PlannerState
    balance: int
    redeemed: Dict[int, int] = field(default_factory=dict)
    message: Optional[str] = None
    failure: Optional[str] = None
    summary: str = ""
    confirmation_code: Optional[str] = None

    @property
    def units_redeemed(self) -> int:
        return sum(self.redeemed.values())

    @property
    def confirmation_url(self) -> Optional[str]:
        if not self.confirmation_code:
            return None
        return (
            f"{SUCCESS_PATH}?code={quote(self.confirmation_code, safe='')}"
            f"&reward={quote(self.summary, safe='')}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "balance": self.balance,
            "redeemed": dict(self.redeemed),
            "units_redeemed": self.units_redeemed,
            "message": self.message,
            "failure": self.failure,
            "summary": self.summary,
            "confirmation_code": self.confirmation_code,
            "confirmation_url": self.confirmation_url,
        }


# -----------------------------
# Planner
# -----------------------------
class RedemptionPlanner:
    """
    One planner per redemption batch. Terminal states are final; retrying
    the remaining units means building a new planner from a fresh cart.
    """

    def __init__(
        self,
        cart: RedemptionCart,
        gateway: RedemptionGateway,
        *,
        code_factory: Callable[[], str] = new_confirmation_code,
    ) -> None:
        self.cart = cart
        self.gateway = gateway
        self.code_factory = code_factory
        self.state = PlannerState.IDLE
        self.unit_index = 0
        self.unit_count = 0

    def validate(self) -> None:
        self.state = PlannerState.VALIDATING
        try:
            if self.cart.total_units == 0:
                raise RedemptionRejected(MSG_NOTHING_SELECTED, "nothing_selected")
            if self.cart.total_cost > self.cart.balance:
                raise RedemptionRejected(
                    f"Seleccionaste {self.cart.total_cost} pts y solo tienes {self.cart.balance} pts.",
                    "insufficient_points",
                )
        except RedemptionRejected:
            self.state = PlannerState.IDLE
            raise

    def submit(self) -> RedemptionResult:
        self.validate()
        return self.execute()

    def execute(self) -> RedemptionResult:
        """
        Redeem every selected unit, reward by reward, in catalog order.
        """
        self.state = PlannerState.EXECUTING
        self.unit_count = self.cart.total_units
        self.unit_index = 0

        current_balance = self.cart.balance
        redeemed: Dict[int, int] = {}
        message: Optional[str] = None
        failure: Optional[str] = None

        for reward in self.cart.rewards:
            qty = self.cart.quantities.get(reward.id, 0)
            if qty <= 0:
                continue

            for _ in range(qty):
                self.unit_index += 1

                if current_balance < reward.points_cost:
                    failure = "insufficient_points"
                    if redeemed:
                        message = (
                            f'No alcanzaron los puntos para canjear todas las unidades de "{reward.name}". '
                            "Se canjearon solo algunas."
                        )
                        break
                    return self._abort(current_balance, MSG_NOT_ENOUGH_POINTS, failure)

                try:
                    response = self.gateway.redeem_unit(reward.id)
                except Exception as e:
                    log.error(f"[REDEEM] reward={reward.id} unit {self.unit_index}/{self.unit_count} failed: {e}")
                    response = None

                if response != REDEEM_OK:
                    if response is not None:
                        log.warning(f"[REDEEM] reward={reward.id} unexpected response: {response!r}")
                    failure = "redeem_failed"
                    if redeemed:
                        message = MSG_PARTIAL_AFTER_ERROR
                        break
                    return self._abort(current_balance, MSG_REDEEM_FAILED, failure)

                redeemed[reward.id] = redeemed.get(reward.id, 0) + 1
                current_balance -= reward.points_cost
                current_balance = self._reconcile(current_balance)
                log.info(f"[REDEEM] reward={reward.id} unit {self.unit_index}/{self.unit_count} OK")

        self.cart.balance = current_balance

        if not redeemed:
            return self._abort(current_balance, message, failure)

        summary = ", ".join(
            f"{r.name} x{redeemed[r.id]}" for r in self.cart.rewards if redeemed.get(r.id, 0) > 0
        )
        full = sum(redeemed.values()) == self.unit_count
        self.state = PlannerState.FULL_SUCCESS if full else PlannerState.PARTIAL_SUCCESS
        self.cart.clear()

        return RedemptionResult(
            state=self.state,
            balance=current_balance,
            redeemed=redeemed,
            message=None if full else message,
            failure=None if full else failure,
            summary=summary,
            confirmation_code=self.code_factory(),
        )

    def _reconcile(self, estimate: int) -> int:
        try:
            authoritative = self.gateway.fetch_balance()
        except Exception as e:
            log.warning(f"[REDEEM] balance re-read failed, keeping estimate {estimate}: {e}")
            return estimate
        return estimate if authoritative is None else int(authoritative)

    def _abort(self, balance: int, message: Optional[str], failure: Optional[str]) -> RedemptionResult:
        self.state = PlannerState.ABORTED_NO_CHANGE
        self.cart.balance = balance
        return RedemptionResult(
            state=self.state,
            balance=balance,
            message=message,
            failure=failure,
        )
