"""Domain exceptions and their HTTP error mapping.

Services raise these; `register_exception_handlers` renders them in the
standard error format: { "error": { "code": str, "message": str, "detail": object } }
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class StoreDirectoryError(Exception):
    """Base exception for the store directory services."""

    code = "STORE_DIRECTORY_ERROR"
    status_code = 500

    def __init__(self, message: str, detail: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "detail": self.detail,
            }
        }


class NotFoundError(StoreDirectoryError):
    """Raised when a store or user doesn't exist."""

    code = "NOT_FOUND"
    status_code = 404


class OwnershipError(StoreDirectoryError):
    """Raised when a user tries to mutate a store they don't own."""

    code = "NOT_OWNER"
    status_code = 403

    def __init__(self, store_id: int):
        super().__init__(
            "You must own a store in order to edit it!",
            detail={"store_id": store_id},
        )


class AuthenticationError(StoreDirectoryError):
    code = "NOT_AUTHENTICATED"
    status_code = 401


class ConflictError(StoreDirectoryError):
    code = "CONFLICT"
    status_code = 409


class InvalidResetTokenError(StoreDirectoryError):
    code = "INVALID_RESET_TOKEN"
    status_code = 400

    def __init__(self):
        super().__init__("Password reset is invalid or has expired")


def register_exception_handlers(app: FastAPI, *, debug: bool = False) -> None:
    """Attach handlers for domain errors and a catch-all 500 handler."""

    @app.exception_handler(StoreDirectoryError)
    async def domain_exception_handler(request: Request, exc: StoreDirectoryError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": str(exc) if debug else "Internal server error",
                    "detail": None,
                }
            },
        )
