"""Map (near) query: SQL shape, plus PostGIS-backed behavior when available."""

import pytest
from httpx import AsyncClient
from sqlalchemy.dialects import postgresql

from store_directory.services.stores import MAP_LIMIT, near_query, near_stores
from tests.conftest import DEFAULT_COORDINATES


def test_near_query_uses_geography_distance() -> None:
    lng, lat = DEFAULT_COORDINATES
    sql = str(near_query(lat, lng).compile(dialect=postgresql.dialect()))

    assert "ST_DWithin(" in sql
    assert "ST_Distance(" in sql
    assert "ST_MakePoint(stores.longitude, stores.latitude)" in sql
    assert "AS geography)" in sql
    assert "ORDER BY distance_m" in sql
    assert "LIMIT" in sql


@pytest.mark.postgis
@pytest.mark.asyncio
async def test_near_stores_filters_by_distance_and_sorts(make_user, make_store):
    owner = await make_user()
    lng, lat = DEFAULT_COORDINATES
    await make_store(owner, "Two Km North", coordinates=[lng, lat + 0.018])
    await make_store(owner, "Right Here", coordinates=[lng, lat])
    await make_store(owner, "Fifty Km North", coordinates=[lng, lat + 0.45])

    nearby = await near_stores(lat=lat, lng=lng)

    assert [s.name for s in nearby] == ["Right Here", "Two Km North"]
    assert nearby[0].distance_m == 0.0
    assert 1_900 < nearby[1].distance_m < 2_100


@pytest.mark.postgis
@pytest.mark.asyncio
async def test_near_stores_caps_results(make_user, make_store):
    owner = await make_user()
    lng, lat = DEFAULT_COORDINATES
    for i in range(MAP_LIMIT + 2):
        await make_store(owner, f"Store {i}", coordinates=[lng, lat + i * 0.001])

    nearby = await near_stores(lat=lat, lng=lng)

    assert [s.name for s in nearby] == [f"Store {i}" for i in range(MAP_LIMIT)]


@pytest.mark.postgis
@pytest.mark.asyncio
async def test_near_endpoint(client: AsyncClient, make_user, make_store):
    owner = await make_user()
    lng, lat = DEFAULT_COORDINATES
    await make_store(owner, "Coffee Corner")
    await make_store(owner, "Far Coffee", coordinates=[lng + 1.0, lat])

    response = await client.get("/v1/stores/near", params={"lat": lat, "lng": lng})

    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == ["Coffee Corner"]
    assert response.json()[0]["distanceM"] == 0.0
