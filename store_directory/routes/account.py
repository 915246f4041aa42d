"""Account endpoints for the logged-in user."""

from fastapi import APIRouter, Depends

from store_directory.models import User
from store_directory.schemas import AccountUpdate, StoreResponse, UserResponse
from store_directory.routes.deps import get_current_user
from store_directory.services.auth import get_account, update_account
from store_directory.services.hearts import get_hearted_stores

router = APIRouter()


@router.get("", response_model=UserResponse)
async def read_account(user: User = Depends(get_current_user)) -> UserResponse:
    return await get_account(user)


@router.patch("", response_model=UserResponse)
async def patch_account(payload: AccountUpdate, user: User = Depends(get_current_user)) -> UserResponse:
    return await update_account(user.id, payload)


@router.get("/hearts", response_model=list[StoreResponse])
async def hearts(user: User = Depends(get_current_user)) -> list[StoreResponse]:
    """Stores the user has hearted."""
    return await get_hearted_stores(user.id)
