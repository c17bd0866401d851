from fastapi import APIRouter, Depends
from pydantic import BaseModel

from cugini.services.claim_service import claim_code
from cugini.services.core_service import UserContext, require_user_context
from cugini.utils.envelope import error, ok

router = APIRouter(prefix="/claim", tags=["claim"])

OUTCOME_STATUS = {
    "invalid": 409,
    "not_authenticated": 401,
    "unknown": 502,
    "error": 502,
}


class ClaimIn(BaseModel):
    code: str


@router.post("")
def claim(inb: ClaimIn, ctx: UserContext = Depends(require_user_context)):
    outcome = claim_code(ctx.sb, inb.code)
    if outcome.ok:
        return ok(outcome.to_dict())
    return error(outcome.message, outcome.status, OUTCOME_STATUS.get(outcome.status, 502), outcome.to_dict())
