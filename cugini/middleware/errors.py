import logging

from fastapi import FastAPI, Request

from cugini.services.core_service import CoreError
from cugini.utils.envelope import error

log = logging.getLogger("cugini.errors")

MSG_UNEXPECTED = "Error inesperado. Intenta nuevamente."


def install_error_handlers(app: FastAPI) -> None:
    """
    Every failure leaves as an envelope with a user-facing message; stack
    traces stay in the logs.
    """

    @app.exception_handler(CoreError)
    async def core_error_handler(request: Request, exc: CoreError):
        if exc.status_code >= 500:
            log.error(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
        return error(exc.message, exc.code, exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        log.exception(f"{request.method} {request.url.path} -> unhandled {type(exc).__name__}")
        return error(MSG_UNEXPECTED, "unexpected_error", 500)
