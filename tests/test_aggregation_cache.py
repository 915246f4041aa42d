"""Report caching: hits skip the database, writes drop cached reports."""

from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from store_directory.schemas import StoreUpdate
from store_directory.services import aggregation
from store_directory.services.aggregation import get_tags_list, get_top_stores
from store_directory.services.stores import update_store


@pytest.fixture
def report_cache(monkeypatch: pytest.MonkeyPatch) -> dict[str, list[dict[str, Any]]]:
    """In-memory stand-in for the Redis report cache."""
    cache: dict[str, list[dict[str, Any]]] = {}

    async def fake_get(name: str) -> list[dict[str, Any]] | None:
        return cache.get(name)

    async def fake_set(name: str, rows: list[dict[str, Any]]) -> None:
        cache[name] = rows

    async def fake_clear() -> None:
        cache.clear()

    monkeypatch.setattr(aggregation, "get_aggregate_cache", fake_get)
    monkeypatch.setattr(aggregation, "set_aggregate_cache", fake_set)
    monkeypatch.setattr(aggregation, "clear_aggregate_cache", fake_clear)
    return cache


@pytest.mark.asyncio
async def test_cached_top_stores_are_served(db, report_cache):
    report_cache["top_stores"] = [
        {
            "id": 7,
            "photo": None,
            "name": "Cached Cafe",
            "slug": "cached-cafe",
            "reviews": [{"rating": 5, "text": "great"}, {"rating": 4, "text": "good"}],
            "average_rating": 4.5,
        }
    ]

    top = await get_top_stores()

    assert [(t.name, t.average_rating) for t in top] == [("Cached Cafe", 4.5)]
    assert top[0].reviews[1].text == "good"


@pytest.mark.asyncio
async def test_reports_are_cached_after_first_read(make_user, make_store, make_review, report_cache):
    owner = await make_user()
    store = await make_store(owner, "Mixed", tags=["Wifi"])
    await make_review(store.id, owner, 3)
    await make_review(store.id, owner, 5)

    tags = await get_tags_list()
    top = await get_top_stores()

    assert report_cache["tags"] == [{"tag": "Wifi", "count": 1}]
    assert report_cache["top_stores"][0]["average_rating"] == 4.0
    assert await get_tags_list() == tags
    assert await get_top_stores() == top


@pytest.mark.asyncio
async def test_store_create_drops_cached_reports(make_user, make_store, report_cache):
    owner = await make_user()
    await make_store(owner, "Cafe", tags=["Wifi"])
    assert [t.tag for t in await get_tags_list()] == ["Wifi"]

    await make_store(owner, "Bar", tags=["Licensed", "Licensed"])

    assert report_cache == {}
    assert [(t.tag, t.count) for t in await get_tags_list()] == [("Licensed", 2), ("Wifi", 1)]


@pytest.mark.asyncio
async def test_store_update_drops_cached_reports(make_user, make_store, report_cache):
    owner = await make_user()
    store = await make_store(owner, "Cafe", tags=["Wifi"])
    await get_tags_list()

    await update_store(store.id, owner, StoreUpdate(tags=["Vegetarian"]))

    assert "tags" not in report_cache
    assert [t.tag for t in await get_tags_list()] == ["Vegetarian"]


@pytest.mark.asyncio
async def test_review_drops_cached_reports(make_user, make_store, make_review, report_cache):
    owner = await make_user()
    store = await make_store(owner, "Cafe")
    await make_review(store.id, owner, 4)
    assert await get_top_stores() == []
    assert report_cache["top_stores"] == []

    await make_review(store.id, owner, 2)

    assert "top_stores" not in report_cache
    assert [t.average_rating for t in await get_top_stores()] == [3.0]


@pytest.mark.asyncio
async def test_redis_errors_fall_back_to_database(make_user, make_store, monkeypatch: pytest.MonkeyPatch):
    async def broken(*args: Any) -> None:
        raise RedisConnectionError("connection refused")

    monkeypatch.setattr(aggregation, "get_aggregate_cache", broken)
    monkeypatch.setattr(aggregation, "set_aggregate_cache", broken)
    monkeypatch.setattr(aggregation, "clear_aggregate_cache", broken)

    owner = await make_user()
    await make_store(owner, "Cafe", tags=["Wifi"])

    assert [t.tag for t in await get_tags_list()] == ["Wifi"]


class FakeRedis:
    """Just the commands the report cache uses."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.values[key] = value
        self.ttls[key] = ttl

    async def scan_iter(self, match: str):
        prefix = match.rstrip("*")
        for key in list(self.values):
            if key.startswith(prefix):
                yield key

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.values.pop(key, None)


@pytest.mark.asyncio
async def test_redis_report_cache_keys_and_ttl(monkeypatch: pytest.MonkeyPatch):
    from store_directory.stores import redis as redis_store

    fake = FakeRedis()
    fake.values["session:1"] = "unrelated"
    monkeypatch.setattr(redis_store, "_redis", fake)

    assert await redis_store.get_aggregate_cache("tags") is None
    await redis_store.set_aggregate_cache("tags", [{"tag": "Wifi", "count": 2}])

    assert fake.ttls["agg:tags"] == 60
    assert await redis_store.get_aggregate_cache("tags") == [{"tag": "Wifi", "count": 2}]

    await redis_store.clear_aggregate_cache()

    assert await redis_store.get_aggregate_cache("tags") is None
    assert fake.values == {"session:1": "unrelated"}


@pytest.mark.asyncio
async def test_redis_report_cache_requires_init(monkeypatch: pytest.MonkeyPatch):
    from store_directory.stores import redis as redis_store

    monkeypatch.setattr(redis_store, "_redis", None)

    with pytest.raises(RuntimeError):
        await redis_store.get_aggregate_cache("tags")
