from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse


def ok(data: Any = None, meta: Optional[Dict[str, Any]] = None, status: int = 200):
    return JSONResponse(
        status_code=status,
        content={
            "ok": True,
            "data": data,
            "meta": meta or {},
        },
    )


def error(message: str, code: str = "error", status: int = 400, data: Any = None):
    content: Dict[str, Any] = {
        "ok": False,
        "error": code,
        "message": message,
    }
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status, content=content)
