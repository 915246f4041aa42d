"""Hearts: a user's set of favorite stores. Toggling adds or removes.

Hearts are read and written through the `user_hearts` association table;
the `User.hearts` relationship is never loaded.
"""

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from store_directory.exceptions import NotFoundError
from store_directory.models import Store, user_hearts
from store_directory.schemas import StoreResponse
from store_directory.services.stores import to_store_response
from store_directory.stores.postgres import get_session


async def load_heart_ids(session: AsyncSession, user_id: int) -> list[int]:
    """Ids of the stores `user_id` has hearted, in store id order."""
    result = await session.execute(
        select(user_hearts.c.store_id)
        .where(user_hearts.c.user_id == user_id)
        .order_by(user_hearts.c.store_id)
    )
    return list(result.scalars().all())


async def toggle_heart(user_id: int, store_id: int) -> list[int]:
    """Heart `store_id` for the user, or un-heart it if already hearted.

    Returns:
        The user's heart ids after the toggle.
    """
    async with get_session() as session:
        removed = await session.execute(
            delete(user_hearts).where(
                user_hearts.c.user_id == user_id,
                user_hearts.c.store_id == store_id,
            )
        )
        if removed.rowcount == 0:
            exists = await session.execute(select(Store.id).where(Store.id == store_id))
            if exists.scalar_one_or_none() is None:
                raise NotFoundError(f"Store {store_id} not found", detail={"store_id": store_id})
            await session.execute(insert(user_hearts).values(user_id=user_id, store_id=store_id))

        return await load_heart_ids(session, user_id)


async def get_hearted_stores(user_id: int) -> list[StoreResponse]:
    async with get_session() as session:
        result = await session.execute(
            select(Store)
            .join(user_hearts, user_hearts.c.store_id == Store.id)
            .where(user_hearts.c.user_id == user_id)
            .order_by(Store.created.desc(), Store.id.desc())
        )
        return [to_store_response(s) for s in result.scalars().all()]
