"""Schemas for store endpoints (/v1/stores, /v1/tags, /v1/top)."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from store_directory.schemas.review import ReviewResponse
from store_directory.schemas.user import PublicUser


def _require_text(value: str | None, message: str) -> str:
    if value is None or not value.strip():
        raise ValueError(message)
    return value.strip()


def _clean_tags(tags: list[str]) -> list[str]:
    return [tag.strip() for tag in tags if tag and tag.strip()]


class Location(BaseModel):
    """GeoJSON-style point with a street address.

    `coordinates` is [longitude, latitude].
    """

    type: Literal["Point"] = "Point"
    coordinates: list[float] = Field(min_length=2, max_length=2)
    address: str = Field(max_length=500)

    @field_validator("coordinates", mode="before")
    @classmethod
    def _require_coordinates(cls, v: object) -> object:
        if v is None or v == [] or v == "":
            raise ValueError("You must supply coordinates!")
        return v

    @field_validator("coordinates")
    @classmethod
    def _check_ranges(cls, v: list[float]) -> list[float]:
        lng, lat = v
        if not -180.0 <= lng <= 180.0:
            raise ValueError("Longitude must be between -180 and 180")
        if not -90.0 <= lat <= 90.0:
            raise ValueError("Latitude must be between -90 and 90")
        return v

    @field_validator("address", mode="before")
    @classmethod
    def _require_address(cls, v: object) -> str:
        return _require_text(v if isinstance(v, str) else None, "You must supply an address!")

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]


class StoreCreate(BaseModel):
    """Request body for creating a store."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(max_length=200)
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    location: Location
    photo: str | None = Field(default=None, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, v: object) -> str:
        return _require_text(v if isinstance(v, str) else None, "Please enter a store name!")

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)


class StoreUpdate(BaseModel):
    """Request body for updating a store. Omitted fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, max_length=200)
    description: str | None = None
    tags: list[str] | None = None
    location: Location | None = None
    photo: str | None = Field(default=None, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, v: object) -> str:
        return _require_text(v if isinstance(v, str) else None, "Please enter a store name!")

    @field_validator("tags", "location", mode="before")
    @classmethod
    def _reject_null(cls, v: object, info: ValidationInfo) -> object:
        # Omit a field to leave it unchanged; null is not a value for it.
        if v is None:
            raise ValueError(f"{info.field_name} may not be null")
        return v

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _clean_tags(v)


class StoreResponse(BaseModel):
    """A store as returned by list/create/update endpoints."""

    id: int
    name: str
    slug: str
    description: str | None = None
    tags: list[str]
    location: Location
    photo: str | None = None
    author_id: int = Field(alias="authorId")
    created: datetime

    model_config = {"populate_by_name": True}


class StoreDetail(StoreResponse):
    """Store page: store + author + reviews (joined at read time)."""

    author: PublicUser
    reviews: list[ReviewResponse] = Field(default_factory=list)


class StorePage(BaseModel):
    """One page of the store listing."""

    stores: list[StoreResponse]
    count: int = Field(ge=0)
    page: int = Field(ge=1)
    pages: int = Field(ge=0)


class SearchResult(BaseModel):
    """Store matched by the text search endpoint."""

    id: int
    name: str
    slug: str
    description: str | None = None
    score: float


class MapStore(BaseModel):
    """Reduced store shape for the map (near) endpoint."""

    id: int
    name: str
    slug: str
    description: str | None = None
    location: Location
    photo: str | None = None
    distance_m: float = Field(alias="distanceM")

    model_config = {"populate_by_name": True}


class TagCount(BaseModel):
    """One row of the tag histogram."""

    tag: str
    count: int = Field(ge=1)


class TagsResponse(BaseModel):
    """Tag histogram plus the stores for the selected tag (or all stores)."""

    tag: str | None = None
    tags: list[TagCount]
    stores: list[StoreResponse]


class TopStoreReview(BaseModel):
    rating: int
    text: str


class TopStore(BaseModel):
    """Top-rated store projection."""

    id: int
    photo: str | None = None
    name: str
    slug: str
    reviews: list[TopStoreReview]
    average_rating: float = Field(alias="averageRating")

    model_config = {"populate_by_name": True}
