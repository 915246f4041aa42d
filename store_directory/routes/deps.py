"""Shared router dependencies.

Usage:
    @router.get("/protected")
    async def protected(user: User = Depends(get_current_user)):
        return {"user_id": user.id}
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from store_directory.exceptions import AuthenticationError
from store_directory.models import User
from store_directory.services.auth import decode_access_token, get_user

# auto_error=False so a missing header gets the standard error body, not FastAPI's 403.
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """Resolve the bearer token to a user or raise 401."""
    if credentials is None:
        raise AuthenticationError("Oops you must be logged in to do that!")

    user_id = decode_access_token(credentials.credentials)
    user = await get_user(user_id)
    if user is None:
        raise AuthenticationError("Invalid token: unknown user")
    return user
