"""Schemas for reviews."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from store_directory.schemas.user import PublicUser


class ReviewCreate(BaseModel):
    """Request body for POST /v1/reviews/{store_id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: str
    rating: int = Field(ge=1, le=5)

    @field_validator("text", mode="before")
    @classmethod
    def _require_text(cls, v: object) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Your review must have text!")
        return v


class ReviewResponse(BaseModel):
    id: int
    store_id: int = Field(alias="storeId")
    text: str
    rating: int
    created: datetime
    author: PublicUser | None = None

    model_config = {"populate_by_name": True}
