"""Common schemas for the PostGate API.

Every success body is ``{success: true, data, message?, pagination?}`` and
every error body is ``{error, message}``.
"""

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel


class Pagination(BaseModel):
    """Pagination block for list responses."""
    total: int
    limit: int
    offset: int


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    message: str


def success_body(
    data: Any = None,
    *,
    message: Optional[str] = None,
    pagination: Optional[Pagination] = None,
) -> Dict[str, Any]:
    """Build a success envelope, omitting unset optional keys."""
    body: Dict[str, Any] = {"success": True, "data": jsonable_encoder(data)}
    if message is not None:
        body["message"] = message
    if pagination is not None:
        body["pagination"] = pagination.model_dump()
    return body


def error_body(error: str, message: str) -> Dict[str, Any]:
    return ErrorResponse(error=error, message=message).model_dump()
