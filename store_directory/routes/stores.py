"""Store endpoints.

GET  /v1/stores                 - newest stores, page 1
GET  /v1/stores/page/{page}     - newest stores, given page (302 to last page if past the end)
POST /v1/stores                 - create store (auth)
GET  /v1/stores/search?q=       - text search, best 5
GET  /v1/stores/near?lat=&lng=  - stores within 10 km, nearest first
GET  /v1/stores/slug/{slug}     - store page with author and reviews
GET  /v1/stores/{id}/edit       - store for its owner's edit form (auth, owner)
PUT  /v1/stores/{id}            - update store (auth, owner)
POST /v1/stores/{id}/heart      - toggle heart (auth)

Routers are thin: call services for business logic.
"""

from fastapi import APIRouter, Depends, Path, Query, Request, status
from fastapi.responses import RedirectResponse

from store_directory.exceptions import NotFoundError
from store_directory.models import User
from store_directory.routes.deps import get_current_user
from store_directory.schemas import (
    ErrorResponse,
    MapStore,
    SearchResult,
    StoreCreate,
    StoreDetail,
    StorePage,
    StoreResponse,
    StoreUpdate,
    UserResponse,
)
from store_directory.services.auth import to_user_response
from store_directory.services.hearts import toggle_heart
from store_directory.services.stores import (
    create_store,
    get_store_by_slug,
    get_store_for_edit,
    list_stores,
    near_stores,
    search_stores,
    update_store,
)

router = APIRouter()

OWNER_ERRORS = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


async def _store_page(request: Request, page: int) -> StorePage | RedirectResponse:
    result = await list_stores(page=page)
    if not result.stores and page > 1 and result.pages:
        # Past the last page: send the client to the last one that exists.
        return RedirectResponse(
            url=str(request.url_for("list_stores_page", page=result.pages)),
            status_code=status.HTTP_302_FOUND,
        )
    return result


@router.get("", response_model=StorePage)
async def list_stores_first(request: Request) -> StorePage | RedirectResponse:
    return await _store_page(request, 1)


@router.get("/page/{page}", response_model=StorePage, name="list_stores_page")
async def list_stores_page(request: Request, page: int = Path(ge=1)) -> StorePage | RedirectResponse:
    return await _store_page(request, page)


@router.post(
    "",
    response_model=StoreResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}},
)
async def post_store(payload: StoreCreate, user: User = Depends(get_current_user)) -> StoreResponse:
    return await create_store(user, payload)


@router.get("/search", response_model=list[SearchResult])
async def search(q: str = Query(min_length=1, max_length=200, description="Search text")) -> list[SearchResult]:
    return await search_stores(q)


@router.get("/near", response_model=list[MapStore])
async def near(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
) -> list[MapStore]:
    """Stores within 10 km of the point, nearest first (max 10)."""
    return await near_stores(lat=lat, lng=lng)


@router.get("/slug/{slug}", response_model=StoreDetail, responses={404: {"model": ErrorResponse}})
async def get_by_slug(slug: str = Path(min_length=1, max_length=255)) -> StoreDetail:
    store = await get_store_by_slug(slug)
    if store is None:
        raise NotFoundError(f"Store {slug} not found", detail={"slug": slug})
    return store


@router.get("/{store_id}/edit", response_model=StoreResponse, responses=OWNER_ERRORS)
async def edit_store(store_id: int, user: User = Depends(get_current_user)) -> StoreResponse:
    return await get_store_for_edit(store_id, user)


@router.put("/{store_id}", response_model=StoreResponse, responses=OWNER_ERRORS)
async def put_store(
    store_id: int,
    payload: StoreUpdate,
    user: User = Depends(get_current_user),
) -> StoreResponse:
    return await update_store(store_id, user, payload)


@router.post(
    "/{store_id}/heart",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def heart_store(store_id: int, user: User = Depends(get_current_user)) -> UserResponse:
    hearts = await toggle_heart(user.id, store_id)
    return to_user_response(user, hearts)
