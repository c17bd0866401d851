from dataclasses import dataclass, field
from typing import Any, Dict

from fastapi import Request

from cugini.db import get_user_supabase

MSG_LOGIN_REQUIRED = "Debes iniciar sesión."
MSG_SESSION_EXPIRED = "Tu sesión expiró. Inicia sesión nuevamente."


class CoreError(Exception):
    def __init__(self, message: str, status_code: int = 400, code: str = "error"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    # server-controlled claims; users cannot edit these themselves
    app_metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UserContext:
    """
    Everything a request needs to talk to the backend as the signed-in user.
    """
    identity: Identity
    sb: Any
    access_token: str


def _bearer_token(request: Request) -> str:
    auth = request.headers.get("Authorization")
    if not auth or not auth.lower().startswith("bearer "):
        raise CoreError(MSG_LOGIN_REQUIRED, 401, "not_authenticated")
    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise CoreError(MSG_LOGIN_REQUIRED, 401, "not_authenticated")
    return token


def _require_supabase(access_token: str):
    supabase = get_user_supabase(access_token)
    if not supabase:
        raise CoreError("Supabase client unavailable", 500, "supabase_config")
    return supabase


def _get_user(supabase, access_token: str) -> Identity:
    try:
        res = supabase.auth.get_user(access_token)
        user = res.user if res else None
    except Exception:
        raise CoreError(MSG_SESSION_EXPIRED, 401, "not_authenticated")

    if not user or not user.id:
        raise CoreError(MSG_LOGIN_REQUIRED, 401, "not_authenticated")

    return Identity(
        id=str(user.id),
        email=(user.email or "").strip(),
        metadata=dict(user.user_metadata or {}),
        app_metadata=dict(getattr(user, "app_metadata", None) or {}),
    )


def require_user_context(request: Request) -> UserContext:
    token = _bearer_token(request)
    supabase = _require_supabase(token)
    identity = _get_user(supabase, token)
    return UserContext(identity=identity, sb=supabase, access_token=token)
