from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from cugini.services import announcements_service, rewards_service
from cugini.services.admin import codes, movements, users
from cugini.services.admin.authorization import is_admin, require_admin_context
from cugini.services.core_service import UserContext, require_user_context
from cugini.utils.envelope import ok

router = APIRouter(prefix="/admin", tags=["admin"])


class CodesIn(BaseModel):
    prefix: str = ""
    quantity: int = Field(1, description="codes to create, 1..500")
    points: int


class RewardIn(BaseModel):
    name: str
    points_cost: int
    description: Optional[str] = None
    image_url: Optional[str] = None


class ActiveIn(BaseModel):
    is_active: bool


class AnnouncementIn(BaseModel):
    message: str
    title: Optional[str] = None
    link_url: Optional[str] = None
    is_active: bool = True
    starts_at: Optional[str] = None
    ends_at: Optional[str] = None


# -----------------------------
# Access
# -----------------------------
@router.get("/me")
def admin_me(ctx: UserContext = Depends(require_user_context)):
    return ok({"is_admin": is_admin(ctx)})


# -----------------------------
# Earn codes
# -----------------------------
@router.get("/codes")
def admin_codes(limit: Optional[int] = None, ctx: UserContext = Depends(require_admin_context)):
    return ok([c.to_dict() for c in codes.list_codes(ctx.sb, limit=limit)])


@router.post("/codes")
def admin_create_codes(inb: CodesIn, ctx: UserContext = Depends(require_admin_context)):
    return ok(codes.create_codes(ctx.sb, inb.prefix, inb.quantity, inb.points))


# -----------------------------
# Rewards
# -----------------------------
@router.get("/rewards")
def admin_rewards(ctx: UserContext = Depends(require_admin_context)):
    return ok([r.to_dict() for r in rewards_service.list_rewards(ctx.sb)])


@router.post("/rewards")
def admin_create_reward(inb: RewardIn, ctx: UserContext = Depends(require_admin_context)):
    reward = rewards_service.create_reward(
        ctx.sb,
        name=inb.name,
        points_cost=inb.points_cost,
        description=inb.description,
        image_url=inb.image_url,
    )
    return ok(reward, status=201)


@router.post("/rewards/image")
async def admin_reward_image(
    request: Request,
    filename: str = "reward.jpg",
    ctx: UserContext = Depends(require_admin_context),
):
    # raw image bytes in the body, file name in the query
    content = await request.body()
    content_type = request.headers.get("content-type") or "application/octet-stream"
    url = rewards_service.upload_reward_image(ctx.sb, filename, content, content_type)
    return ok({"image_url": url})


@router.put("/rewards/{reward_id}")
def admin_update_reward(reward_id: int, inb: RewardIn, ctx: UserContext = Depends(require_admin_context)):
    rewards_service.update_reward(
        ctx.sb,
        reward_id,
        name=inb.name,
        points_cost=inb.points_cost,
        description=inb.description,
        image_url=inb.image_url,
    )
    return ok({"id": reward_id})


@router.post("/rewards/{reward_id}/active")
def admin_toggle_reward(reward_id: int, inb: ActiveIn, ctx: UserContext = Depends(require_admin_context)):
    rewards_service.set_reward_active(ctx.sb, reward_id, inb.is_active)
    return ok({"id": reward_id, "is_active": inb.is_active})


# -----------------------------
# Announcements
# -----------------------------
@router.get("/announcements")
def admin_announcements(ctx: UserContext = Depends(require_admin_context)):
    return ok([a.to_dict() for a in announcements_service.list_announcements(ctx.sb)])


@router.post("/announcements")
def admin_create_announcement(inb: AnnouncementIn, ctx: UserContext = Depends(require_admin_context)):
    row = announcements_service.create_announcement(
        ctx.sb,
        created_by=ctx.identity.id,
        message=inb.message,
        title=inb.title,
        link_url=inb.link_url,
        is_active=inb.is_active,
        starts_at=inb.starts_at,
        ends_at=inb.ends_at,
    )
    return ok(row, status=201)


@router.post("/announcements/{announcement_id}/active")
def admin_toggle_announcement(
    announcement_id: int,
    inb: ActiveIn,
    ctx: UserContext = Depends(require_admin_context),
):
    announcements_service.set_announcement_active(ctx.sb, announcement_id, inb.is_active)
    return ok({"id": announcement_id, "is_active": inb.is_active})


# -----------------------------
# Users and movements
# -----------------------------
@router.get("/users")
def admin_users(ctx: UserContext = Depends(require_admin_context)):
    return ok(users.list_app_users(ctx.sb))


@router.get("/movements")
def admin_movements(kind: str = "all", ctx: UserContext = Depends(require_admin_context)):
    movs = movements.filter_movements(movements.fetch_movements(ctx.sb), kind)
    return ok([m.to_dict() for m in movs], meta={"kind": kind.lower(), "count": len(movs)})
