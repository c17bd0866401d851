"""
Earn-code claiming.

The backend's `claim_points` procedure owns single-use enforcement and the
credit itself; this module only validates the input and translates the
procedure's sentinel strings into messages. No retries: a claim that timed
out may still have been applied.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict

from cugini.services.core_service import CoreError

log = logging.getLogger("cugini.claim")

CLAIM_OK = "OK"
CLAIM_INVALID = ("INVALID_CODE", "INVALIDO_O_VENCIDO")
CLAIM_NO_AUTH = "NO_AUTH"


@dataclass(frozen=True)
class ClaimOutcome:
    status: str  # success | invalid | not_authenticated | unknown | error
    variant: str  # success | warn | error
    message: str
    raw: Any = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "variant": self.variant,
            "message": self.message,
        }


def clean_code(code: str) -> str:
    # trim only: codes are case- and dash-sensitive
    return (code or "").strip()


def interpret_claim_response(data: Any) -> ClaimOutcome:
    if data == CLAIM_OK:
        return ClaimOutcome("success", "success", "Código reclamado. Ya tienes tus puntos.", data)
    if data in CLAIM_INVALID:
        return ClaimOutcome("invalid", "warn", "Código inválido o ya usado.", data)
    if data == CLAIM_NO_AUTH:
        return ClaimOutcome("not_authenticated", "warn", "Debes iniciar sesión para reclamar.", data)

    text = str(data if data is not None else "").strip() or "Desconocida"
    return ClaimOutcome("unknown", "warn", f"Respuesta del servidor: {text}", data)


def claim_code(sb, code: str) -> ClaimOutcome:
    cleaned = clean_code(code)
    if not cleaned:
        raise CoreError("Escribe un código válido.", 400, "empty_code")

    try:
        res = sb.rpc("claim_points", {"p_code": cleaned}).execute()
    except Exception as e:
        log.error(f"[CLAIM] claim_points failed: {e}")
        return ClaimOutcome("error", "error", "Ocurrió un error al reclamar el código.")

    outcome = interpret_claim_response(getattr(res, "data", None))
    log.info(f"[CLAIM] outcome={outcome.status}")
    return outcome
