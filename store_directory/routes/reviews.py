"""Review endpoints."""

from fastapi import APIRouter, Depends, status

from store_directory.models import User
from store_directory.routes.deps import get_current_user
from store_directory.schemas import ErrorResponse, ReviewCreate, ReviewResponse
from store_directory.services.reviews import add_review

router = APIRouter()


@router.post(
    "/{store_id}",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def post_review(
    store_id: int,
    payload: ReviewCreate,
    user: User = Depends(get_current_user),
) -> ReviewResponse:
    return await add_review(store_id, user, payload)
