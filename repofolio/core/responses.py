from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional


def standard_response(
    success: bool,
    data: Any,
    status_code: int,
    error: Optional[str] = None,
    code: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the uniform envelope: ``data`` only on success, ``error`` only on failure."""
    body: Dict[str, Any] = {"success": success}
    if success:
        body["data"] = jsonable_encoder(data)
    else:
        body["error"] = error or "Unexpected error"
        if code:
            body["code"] = code
    body["status_code"] = status_code
    return body


def success_response(data: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=standard_response(True, data, status_code))


def error_response(status_code: int, error: str, code: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=standard_response(False, None, status_code, error=error, code=code),
    )
