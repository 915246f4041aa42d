"""Schemas shared by every router: error body and health check."""

from typing import Any, Literal

from pydantic import BaseModel

ErrorCode = Literal[
    "NOT_FOUND",
    "NOT_OWNER",
    "NOT_AUTHENTICATED",
    "CONFLICT",
    "INVALID_RESET_TOKEN",
    "INTERNAL_ERROR",
]


class ErrorDetail(BaseModel):
    code: ErrorCode
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Body of every non-validation error.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    Request validation failures keep FastAPI's 422 body.
    """

    error: ErrorDetail


class HealthResponse(BaseModel):
    ok: bool
