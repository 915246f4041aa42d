"""Review service."""

import logging

from sqlalchemy import select

from store_directory.exceptions import NotFoundError
from store_directory.models import Review, Store, User
from store_directory.schemas import ReviewCreate, ReviewResponse
from store_directory.services.aggregation import invalidate_aggregates
from store_directory.services.stores import public_user
from store_directory.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")


async def add_review(store_id: int, author: User, payload: ReviewCreate) -> ReviewResponse:
    """Attach a review by `author` to the store."""
    async with get_session() as session:
        exists = await session.execute(select(Store.id).where(Store.id == store_id))
        if exists.scalar_one_or_none() is None:
            raise NotFoundError(f"Store {store_id} not found", detail={"store_id": store_id})

        review = Review(
            store_id=store_id,
            author_id=author.id,
            text=payload.text,
            rating=payload.rating,
        )
        session.add(review)
        await session.flush()
        response = ReviewResponse(
            id=review.id,
            store_id=review.store_id,
            text=review.text,
            rating=review.rating,
            created=review.created,
            author=public_user(author),
        )

    logger.info(f"Review added: store={store_id} rating={payload.rating} author={author.id}")
    await invalidate_aggregates()
    return response
