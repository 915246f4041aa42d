"""Pydantic schemas for API request/response validation."""

from store_directory.schemas.common import ErrorDetail, ErrorResponse, HealthResponse
from store_directory.schemas.user import (
    AccountUpdate,
    ForgotRequest,
    ForgotResponse,
    LoginRequest,
    PublicUser,
    RegisterRequest,
    ResetRequest,
    TokenResponse,
    UserResponse,
)
from store_directory.schemas.review import ReviewCreate, ReviewResponse
from store_directory.schemas.store import (
    Location,
    MapStore,
    SearchResult,
    StoreCreate,
    StoreDetail,
    StorePage,
    StoreResponse,
    StoreUpdate,
    TagCount,
    TagsResponse,
    TopStore,
    TopStoreReview,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "AccountUpdate",
    "ForgotRequest",
    "ForgotResponse",
    "LoginRequest",
    "PublicUser",
    "RegisterRequest",
    "ResetRequest",
    "TokenResponse",
    "UserResponse",
    "ReviewCreate",
    "ReviewResponse",
    "Location",
    "MapStore",
    "SearchResult",
    "StoreCreate",
    "StoreDetail",
    "StorePage",
    "StoreResponse",
    "StoreUpdate",
    "TagCount",
    "TagsResponse",
    "TopStore",
    "TopStoreReview",
]
