import logging
import re
from typing import Any, Dict

from cugini.config.settings import settings
from cugini.db import get_anon_supabase, get_supabase
from cugini.services.core_service import CoreError, Identity

log = logging.getLogger("cugini.auth")

PHONE_PATTERN = re.compile(r"^\+56\s?9\d{8}$")
MIN_PASSWORD_LENGTH = 8


def _anon():
    sb = get_anon_supabase()
    if not sb:
        raise CoreError("Supabase client unavailable", 500, "supabase_config")
    return sb


def _check_passwords(password: str, password2: str) -> None:
    if password != password2:
        raise CoreError("Las contraseñas no coinciden.", 400, "password_mismatch")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise CoreError(f"Mínimo {MIN_PASSWORD_LENGTH} caracteres.", 400, "password_too_short")


def validate_signup(full_name: str, phone: str, password: str, password2: str) -> None:
    if not (full_name or "").strip():
        raise CoreError("Ingresa tu nombre completo.", 400, "missing_name")
    if not PHONE_PATTERN.match((phone or "").strip()):
        raise CoreError("Formato de teléfono: +56 9XXXXXXXX", 400, "invalid_phone")
    _check_passwords(password, password2)


def sign_up(
    email: str,
    password: str,
    password2: str,
    full_name: str,
    phone: str,
    sb=None,
) -> Dict[str, Any]:
    validate_signup(full_name, phone, password, password2)
    sb = sb or _anon()
    try:
        sb.auth.sign_up(
            {
                "email": email,
                "password": password,
                "options": {
                    "email_redirect_to": settings.auth_redirect_url,
                    "data": {"full_name": full_name.strip(), "phone": phone.strip()},
                },
            }
        )
    except Exception as e:
        msg = str(e)
        if "already registered" in msg.lower():
            raise CoreError("Ya existe una cuenta con ese correo.", 409, "already_registered")
        log.warning(f"[AUTH] sign-up failed for {email}: {msg}")
        raise CoreError(f"Error al crear la cuenta: {msg}", 400, "signup_failed")

    return {"message": "Te enviamos un enlace para verificar tu cuenta. Revisa tu correo."}


def sign_in(email: str, password: str, sb=None) -> Dict[str, Any]:
    sb = sb or _anon()
    try:
        res = sb.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        msg = str(e)
        if "not confirmed" in msg.lower():
            raise CoreError("Debes verificar tu correo antes de iniciar sesión.", 401, "email_not_confirmed")
        raise CoreError(f"Error al iniciar sesión: {msg}", 401, "login_failed")

    session = getattr(res, "session", None)
    user = getattr(res, "user", None)
    if not session or not user:
        raise CoreError("Inicia sesión nuevamente.", 401, "login_failed")

    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "user": {"id": str(user.id), "email": user.email},
        "redirect": "/app",
    }


def send_password_reset(email: str, sb=None) -> Dict[str, Any]:
    sb = sb or _anon()
    try:
        sb.auth.reset_password_for_email(email, {"redirect_to": settings.auth_redirect_url})
    except Exception as e:
        raise CoreError(f"Error al enviar el correo: {e}", 400, "reset_failed")
    return {"message": "Te enviamos un enlace para recuperar tu contraseña."}


def set_new_password(identity: Identity, password: str, password2: str, admin=None) -> Dict[str, Any]:
    """
    Second half of the reset flow: the recovery link signs the user in,
    and the new password is written for that identity.
    """
    _check_passwords(password, password2)
    admin = admin or get_supabase()
    if not admin:
        raise CoreError("Supabase client unavailable", 500, "supabase_config")
    try:
        admin.auth.admin.update_user_by_id(identity.id, {"password": password})
    except Exception as e:
        raise CoreError(f"No se pudo actualizar: {e}", 400, "password_update_failed")
    return {"message": "Contraseña actualizada. Inicia sesión."}
