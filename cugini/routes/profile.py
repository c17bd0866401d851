from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from cugini.services import profile_service
from cugini.services.core_service import UserContext, require_user_context
from cugini.utils.envelope import ok

router = APIRouter(prefix="/profile", tags=["profile"])


class ProfileIn(BaseModel):
    full_name: str
    phone: str
    favorite_pizza: Optional[str] = None
    preferred_time: Optional[str] = None
    birthday: Optional[str] = None
    avatar_url: Optional[str] = None


@router.get("")
def read_profile(ctx: UserContext = Depends(require_user_context)):
    profile = profile_service.get_profile(ctx)
    return ok(profile, meta={"complete": profile_service.is_profile_complete(profile)})


@router.put("")
def save_profile(inb: ProfileIn, ctx: UserContext = Depends(require_user_context)):
    return ok(
        profile_service.save_profile(
            ctx,
            full_name=inb.full_name,
            phone=inb.phone,
            favorite_pizza=inb.favorite_pizza,
            preferred_time=inb.preferred_time,
            birthday=inb.birthday,
            avatar_url=inb.avatar_url,
        )
    )


@router.post("/avatar")
async def upload_avatar(request: Request, ctx: UserContext = Depends(require_user_context)):
    # body is the cropped JPEG itself
    content = await request.body()
    url = profile_service.upload_avatar(ctx, content)
    return ok({"avatar_url": url})
