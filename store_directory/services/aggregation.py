"""Aggregate reports over stores and reviews.

Reports:
- Tag histogram: one row per (store, tag element), grouped by tag,
  count DESC then tag ASC. A tag repeated inside one store counts each time.
- Top stores: stores joined to their reviews, at least MIN_REVIEWS reviews,
  average rating DESC (store id ASC breaks ties), at most TOP_STORES_LIMIT.

Both reports are read-only and cached in Redis for a short TTL. Store and
review writes call `invalidate_aggregates()`. Without Redis (tests, local
minimal env) the reports are always computed from the database.
"""

import logging
from typing import Any

from redis.exceptions import RedisError
from sqlalchemy import func, select

from store_directory.models import Review, Store, StoreTag
from store_directory.schemas import TagCount, TopStore, TopStoreReview
from store_directory.stores.postgres import get_session
from store_directory.stores.redis import clear_aggregate_cache, get_aggregate_cache, set_aggregate_cache

logger = logging.getLogger("uvicorn.error")

MIN_REVIEWS = 2
TOP_STORES_LIMIT = 10

CACHE_TAGS = "tags"
CACHE_TOP_STORES = "top_stores"


async def get_tags_list() -> list[TagCount]:
    """Tag histogram, most used first."""
    cached = await _try_get_cached(CACHE_TAGS)
    if cached is not None:
        return [TagCount.model_validate(row) for row in cached]

    count_col = func.count(StoreTag.id).label("count")
    query = (
        select(StoreTag.tag, count_col)
        .group_by(StoreTag.tag)
        .order_by(count_col.desc(), StoreTag.tag.asc())
    )
    async with get_session() as session:
        result = await session.execute(query)
        tags = [TagCount(tag=tag, count=count) for tag, count in result.all()]

    await _try_set_cached(CACHE_TAGS, [t.model_dump() for t in tags])
    return tags


async def get_top_stores() -> list[TopStore]:
    """Best-rated stores with at least MIN_REVIEWS reviews."""
    cached = await _try_get_cached(CACHE_TOP_STORES)
    if cached is not None:
        return [TopStore.model_validate(row) for row in cached]

    avg_col = func.avg(Review.rating).label("average_rating")
    ranking = (
        select(Store.id, avg_col)
        .join(Review, Review.store_id == Store.id)
        .group_by(Store.id)
        .having(func.count(Review.id) >= MIN_REVIEWS)
        .order_by(avg_col.desc(), Store.id.asc())
        .limit(TOP_STORES_LIMIT)
    )

    async with get_session() as session:
        ranked = [(store_id, float(avg)) for store_id, avg in (await session.execute(ranking)).all()]
        store_ids = [store_id for store_id, _ in ranked]
        stores = {
            s.id: s
            for s in (await session.execute(select(Store).where(Store.id.in_(store_ids)))).scalars()
        }
        reviews: dict[int, list[TopStoreReview]] = {store_id: [] for store_id in store_ids}
        review_rows = await session.execute(
            select(Review.store_id, Review.rating, Review.text)
            .where(Review.store_id.in_(store_ids))
            .order_by(Review.id)
        )
        for store_id, rating, text in review_rows.all():
            reviews[store_id].append(TopStoreReview(rating=rating, text=text))

    top = [
        TopStore(
            id=store_id,
            photo=stores[store_id].photo,
            name=stores[store_id].name,
            slug=stores[store_id].slug,
            reviews=reviews[store_id],
            average_rating=average,
        )
        for store_id, average in ranked
    ]

    await _try_set_cached(CACHE_TOP_STORES, [t.model_dump() for t in top])
    return top


async def invalidate_aggregates() -> None:
    """Drop cached reports after a store or review write."""
    try:
        await clear_aggregate_cache()
    except RuntimeError:
        return
    except RedisError as e:
        logger.warning(f"Aggregate cache invalidation failed: {e}")


async def _try_get_cached(name: str) -> list[dict[str, Any]] | None:
    try:
        return await get_aggregate_cache(name)
    except RuntimeError:
        return None
    except RedisError as e:
        logger.warning(f"Aggregate cache read failed for {name}: {e}")
        return None


async def _try_set_cached(name: str, rows: list[dict[str, Any]]) -> None:
    try:
        await set_aggregate_cache(name, rows)
    except RuntimeError:
        return
    except RedisError as e:
        logger.warning(f"Aggregate cache write failed for {name}: {e}")
