import logging
import time
from typing import Any, Dict, Mapping

from fastapi import Request

log = logging.getLogger("cugini.http")

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "apikey",
    "x-api-key",
    "x-supabase-key",
}


def mask_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k: ("***masked***" if k.lower() in SENSITIVE_HEADERS else v) for k, v in headers.items()}


async def request_logging(request: Request, call_next):
    start = time.time()
    response = await call_next(request)

    entry: Dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": int((time.time() - start) * 1000),
        "client": request.client.host if request.client else None,
    }
    if response.status_code >= 400:
        entry["headers"] = mask_headers(request.headers)

    log.info(entry)
    return response
