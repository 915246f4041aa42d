"""Store service: listing, write path, search and map queries.

Write path (create/update):
1. Validate input (pydantic schemas, at the router boundary)
2. On create, or on update when the name changed: compute slug against the
   slugs already in use (see services.slugs)
3. Persist, then drop cached aggregate reports

Ownership:
- Only the store's author may load it for editing or update it
"""

from collections import Counter
import logging
import math
import re

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from store_directory.exceptions import NotFoundError, OwnershipError
from store_directory.models import Review, Store, StoreTag, User, build_tag_rows
from store_directory.schemas import (
    Location,
    MapStore,
    PublicUser,
    ReviewResponse,
    SearchResult,
    StoreCreate,
    StoreDetail,
    StorePage,
    StoreResponse,
    StoreUpdate,
)
from store_directory.services.aggregation import invalidate_aggregates
from store_directory.services.geo import distance_from, within_distance
from store_directory.services.slugs import base_slug, compute_slug
from store_directory.settings import get_settings
from store_directory.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

SEARCH_LIMIT = 5
MAP_MAX_DISTANCE_M = 10_000  # 10 km
MAP_LIMIT = 10


# ============================================================
# Serialization helpers
# ============================================================


def public_user(user: User) -> PublicUser:
    return PublicUser(id=user.id, name=user.name, gravatar=user.gravatar)


def store_location(store: Store) -> Location:
    return Location(coordinates=[store.longitude, store.latitude], address=store.address)


def to_store_response(store: Store) -> StoreResponse:
    """Convert ORM store to API schema."""
    return StoreResponse(
        id=store.id,
        name=store.name,
        slug=store.slug,
        description=store.description,
        tags=list(store.tags),
        location=store_location(store),
        photo=store.photo,
        author_id=store.author_id,
        created=store.created,
    )


# ============================================================
# Write path
# ============================================================


async def _generate_slug(session: AsyncSession, name: str, *, exclude_id: int | None = None) -> str:
    """Slug for `name`, suffixed by the number of stores already using its base."""
    # Slugs are lowercase [a-z0-9-], so the prefix carries no LIKE wildcards.
    query = select(Store.slug).where(Store.slug.ilike(f"{base_slug(name)}%"))
    if exclude_id is not None:
        query = query.where(Store.id != exclude_id)
    result = await session.execute(query)
    return compute_slug(result.scalars().all(), name)


def confirm_owner(store: Store, user: User) -> None:
    """Raise OwnershipError unless `user` authored `store`."""
    if store.author_id != user.id:
        raise OwnershipError(store.id)


async def create_store(author: User, payload: StoreCreate) -> StoreResponse:
    """Create a store owned by `author`."""
    async with get_session() as session:
        store = Store(
            name=payload.name,
            slug=await _generate_slug(session, payload.name),
            description=payload.description,
            longitude=payload.location.longitude,
            latitude=payload.location.latitude,
            address=payload.location.address,
            photo=payload.photo,
            author_id=author.id,
            tag_rows=build_tag_rows(payload.tags),
        )
        session.add(store)
        await session.flush()
        response = to_store_response(store)

    logger.info(f"Store created: id={response.id} slug={response.slug} author={author.id}")
    await invalidate_aggregates()
    return response


async def _get_store(session: AsyncSession, store_id: int) -> Store:
    result = await session.execute(select(Store).where(Store.id == store_id))
    store = result.scalar_one_or_none()
    if store is None:
        raise NotFoundError(f"Store {store_id} not found", detail={"store_id": store_id})
    return store


async def get_store_for_edit(store_id: int, user: User) -> StoreResponse:
    """Load a store for its owner's edit form."""
    async with get_session() as session:
        store = await _get_store(session, store_id)
        confirm_owner(store, user)
        return to_store_response(store)


async def update_store(store_id: int, user: User, payload: StoreUpdate) -> StoreResponse:
    """Apply a partial update to a store owned by `user`.

    The slug is recomputed only when the incoming name differs from the
    stored one; the store itself never counts as a collision.
    """
    changes = payload.model_dump(exclude_unset=True)

    async with get_session() as session:
        store = await _get_store(session, store_id)
        confirm_owner(store, user)

        new_name = changes.get("name")
        if new_name is not None and new_name != store.name:
            store.slug = await _generate_slug(session, new_name, exclude_id=store.id)
            store.name = new_name

        if "description" in changes:
            store.description = payload.description
        if "tags" in changes:
            store.tag_rows = build_tag_rows(payload.tags)
        if "photo" in changes:
            store.photo = payload.photo
        if "location" in changes:
            store.longitude = payload.location.longitude
            store.latitude = payload.location.latitude
            store.address = payload.location.address

        await session.flush()
        response = to_store_response(store)

    logger.info(f"Store updated: id={response.id} slug={response.slug}")
    await invalidate_aggregates()
    return response


# ============================================================
# Reads
# ============================================================


async def list_stores(page: int = 1) -> StorePage:
    """Newest-first page of stores."""
    limit = get_settings().stores_per_page
    skip = (page - 1) * limit

    async with get_session() as session:
        count = (await session.execute(select(func.count()).select_from(Store))).scalar_one()
        result = await session.execute(
            select(Store)
            .order_by(Store.created.desc(), Store.id.desc())
            .offset(skip)
            .limit(limit)
        )
        stores = result.scalars().all()

    return StorePage(
        stores=[to_store_response(s) for s in stores],
        count=count,
        page=page,
        pages=math.ceil(count / limit),
    )


async def get_store_by_slug(slug: str) -> StoreDetail | None:
    """Store page with author and reviews (newest first)."""
    async with get_session() as session:
        result = await session.execute(
            select(Store)
            .where(Store.slug == slug)
            .options(selectinload(Store.author))
            .order_by(Store.id)
            .limit(1)
        )
        store = result.scalar_one_or_none()
        if store is None:
            return None

        reviews_result = await session.execute(
            select(Review)
            .where(Review.store_id == store.id)
            .options(selectinload(Review.author))
            .order_by(Review.created.desc(), Review.id.desc())
        )
        reviews = reviews_result.scalars().all()

        return StoreDetail(
            **to_store_response(store).model_dump(),
            author=public_user(store.author),
            reviews=[
                ReviewResponse(
                    id=r.id,
                    store_id=r.store_id,
                    text=r.text,
                    rating=r.rating,
                    created=r.created,
                    author=public_user(r.author),
                )
                for r in reviews
            ],
        )


async def get_stores_by_tag(tag: str | None = None) -> list[StoreResponse]:
    """Stores carrying `tag`; every store when no tag is given."""
    query = select(Store).order_by(Store.created.desc(), Store.id.desc())
    if tag:
        query = query.where(Store.tag_rows.any(StoreTag.tag == tag))

    async with get_session() as session:
        result = await session.execute(query)
        return [to_store_response(s) for s in result.scalars().all()]


async def get_stores_by_ids(store_ids: list[int]) -> list[StoreResponse]:
    if not store_ids:
        return []
    async with get_session() as session:
        result = await session.execute(
            select(Store).where(Store.id.in_(store_ids)).order_by(Store.created.desc(), Store.id.desc())
        )
        return [to_store_response(s) for s in result.scalars().all()]


def _words(text: str) -> list[str]:
    return re.findall(r"\w+", text.lower())


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _text_score(store: Store, terms: set[str]) -> float:
    """Number of whole-word occurrences of any term in name and description."""
    counts = Counter(_words(f"{store.name} {store.description or ''}"))
    return float(sum(counts[term] for term in terms))


async def search_stores(q: str, limit: int = SEARCH_LIMIT) -> list[SearchResult]:
    """Stores whose name or description contain a search term as a word, best first.

    Score is the number of term occurrences; ties go to the newest store.
    """
    terms = set(_words(q))
    if not terms:
        return []

    conditions = []
    for term in terms:
        pattern = f"%{_escape_like(term)}%"
        conditions.append(Store.name.ilike(pattern, escape="\\"))
        conditions.append(Store.description.ilike(pattern, escape="\\"))

    async with get_session() as session:
        result = await session.execute(
            select(Store).where(or_(*conditions)).order_by(Store.created.desc(), Store.id.desc())
        )
        candidates = result.scalars().all()

    # LIKE narrows to substrings; only whole-word matches count.
    scored = [(s, _text_score(s, terms)) for s in candidates]
    scored = [pair for pair in scored if pair[1] > 0]
    # sorted() is stable: equal scores keep newest-first order.
    scored = sorted(scored, key=lambda pair: pair[1], reverse=True)[:limit]
    return [
        SearchResult(id=s.id, name=s.name, slug=s.slug, description=s.description, score=score)
        for s, score in scored
    ]


def near_query(
    lat: float,
    lng: float,
    max_distance_m: float = MAP_MAX_DISTANCE_M,
    limit: int = MAP_LIMIT,
) -> Select:
    """Stores within `max_distance_m` of (lat, lng) with their distance, nearest first.

    Requires PostGIS.
    """
    distance = distance_from(lat, lng).label("distance_m")
    return (
        select(Store, distance)
        .where(within_distance(lat, lng, max_distance_m))
        .order_by(distance, Store.id)
        .limit(limit)
    )


async def near_stores(
    lat: float,
    lng: float,
    max_distance_m: float = MAP_MAX_DISTANCE_M,
    limit: int = MAP_LIMIT,
) -> list[MapStore]:
    """Stores within `max_distance_m` of (lat, lng), nearest first."""
    async with get_session() as session:
        result = await session.execute(near_query(lat, lng, max_distance_m, limit))
        rows = result.all()

    return [
        MapStore(
            id=s.id,
            name=s.name,
            slug=s.slug,
            description=s.description,
            location=store_location(s),
            photo=s.photo,
            distance_m=round(distance, 1),
        )
        for s, distance in rows
    ]
