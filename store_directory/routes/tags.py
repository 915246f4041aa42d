"""Tag and top-store reports.

GET /v1/tags        - tag histogram + all stores
GET /v1/tags/{tag}  - tag histogram + stores with that tag
GET /v1/top         - top-rated stores
"""

from fastapi import APIRouter

from store_directory.schemas import TagsResponse, TopStore
from store_directory.services.aggregation import get_tags_list, get_top_stores
from store_directory.services.stores import get_stores_by_tag

router = APIRouter()


@router.get("/tags", response_model=TagsResponse)
async def tags_index() -> TagsResponse:
    return await _tags_response(None)


@router.get("/tags/{tag}", response_model=TagsResponse)
async def tags_for(tag: str) -> TagsResponse:
    return await _tags_response(tag)


async def _tags_response(tag: str | None) -> TagsResponse:
    tags = await get_tags_list()
    stores = await get_stores_by_tag(tag)
    return TagsResponse(tag=tag, tags=tags, stores=stores)


@router.get("/top", response_model=list[TopStore])
async def top_stores() -> list[TopStore]:
    """Top 10 stores by average rating (stores with 2+ reviews)."""
    return await get_top_stores()
