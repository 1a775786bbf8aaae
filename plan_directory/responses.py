"""Uniform response envelope helpers."""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

from plan_directory.schemas import ErrorResponse


def success(data: Any, count: Optional[int] = None) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"success": True, "data": data}
    if count is not None:
        envelope["count"] = count
    return envelope


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )
