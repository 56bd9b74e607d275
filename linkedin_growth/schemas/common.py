"""Common schemas used across the API."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail


class ReconnectResponse(BaseModel):
    """Returned with HTTP 200 when the member's DMA consent is not active.

    The UI shows a "reconnect LinkedIn" prompt instead of an error page.
    """

    error: str = "DMA not enabled"
    message: str
    needs_reconnect: bool = Field(alias="needsReconnect", default=True)

    model_config = {"populate_by_name": True}


class ActionResult(BaseModel):
    """Generic success payload for mutating endpoints."""

    success: bool = True
    message: str
