from fastapi import APIRouter, Depends
from pydantic import BaseModel

from cugini.services import auth_service
from cugini.services.core_service import UserContext, require_user_context
from cugini.utils.envelope import ok

router = APIRouter(prefix="/auth", tags=["auth"])


class SignUpIn(BaseModel):
    email: str
    password: str
    password2: str
    full_name: str
    phone: str


class LoginIn(BaseModel):
    email: str
    password: str


class ResetIn(BaseModel):
    email: str


class NewPasswordIn(BaseModel):
    password: str
    password2: str


@router.post("/signup")
def signup(inb: SignUpIn):
    return ok(auth_service.sign_up(inb.email, inb.password, inb.password2, inb.full_name, inb.phone))


@router.post("/login")
def login(inb: LoginIn):
    return ok(auth_service.sign_in(inb.email, inb.password))


@router.post("/reset")
def reset(inb: ResetIn):
    return ok(auth_service.send_password_reset(inb.email))


@router.post("/new-password")
def new_password(inb: NewPasswordIn, ctx: UserContext = Depends(require_user_context)):
    return ok(auth_service.set_new_password(ctx.identity, inb.password, inb.password2))
