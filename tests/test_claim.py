import pytest

from cugini.services.claim_service import claim_code, interpret_claim_response
from cugini.services.core_service import CoreError


@pytest.mark.parametrize(
    "data, status",
    [
        ("OK", "success"),
        ("INVALID_CODE", "invalid"),
        ("INVALIDO_O_VENCIDO", "invalid"),
        ("NO_AUTH", "not_authenticated"),
        ("LIMITE_DIARIO", "unknown"),
        (None, "unknown"),
    ],
)
def test_sentinels(data, status):
    assert interpret_claim_response(data).status == status


def test_unknown_response_is_echoed():
    assert interpret_claim_response("LIMITE_DIARIO").message == "Respuesta del servidor: LIMITE_DIARIO"
    assert interpret_claim_response("").message == "Respuesta del servidor: Desconocida"


def test_code_is_trimmed_but_not_recased(sb):
    sb.rpc_handlers["claim_points"] = "OK"
    outcome = claim_code(sb, "  cugini-ab12 ")
    assert outcome.ok
    assert sb.rpc_calls == [("claim_points", {"p_code": "cugini-ab12"})]


def test_blank_code_never_reaches_backend(sb):
    with pytest.raises(CoreError) as exc:
        claim_code(sb, "   ")
    assert exc.value.code == "empty_code"
    assert sb.rpc_calls == []


def test_backend_failure_becomes_error_outcome(sb):
    outcome = claim_code(sb, "CUGINI-XYZ123")
    assert outcome.status == "error"
    assert outcome.variant == "error"
    # one attempt only
    assert len(sb.rpc_calls) == 1
