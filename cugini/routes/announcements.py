from fastapi import APIRouter, Depends

from cugini.services.announcements_service import list_active_announcements
from cugini.services.core_service import UserContext, require_user_context
from cugini.utils.envelope import ok

router = APIRouter(prefix="/announcements", tags=["announcements"])


@router.get("")
def active_announcements(ctx: UserContext = Depends(require_user_context)):
    return ok([a.to_dict() for a in list_active_announcements(ctx.sb)])
