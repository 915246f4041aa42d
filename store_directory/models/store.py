"""Store model.

A store is a listing in the directory: name, URL slug, description,
ordered tags, a point location with address, an optional photo and the
owning user. Reviews are not stored here; they are joined at read time.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from store_directory.stores.postgres import Base

if TYPE_CHECKING:
    from store_directory.models.user import User


def utcnow() -> datetime:
    """Current UTC time (column default)."""
    return datetime.now(timezone.utc)


class StoreTag(Base):
    """One element of a store's tag sequence."""

    __tablename__ = "store_tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id", ondelete="CASCADE"), index=True)
    position: Mapped[int] = mapped_column()
    tag: Mapped[str] = mapped_column(String(100), index=True)

    def __repr__(self) -> str:
        return f"<StoreTag {self.tag}>"


class Store(Base):
    """Directory listing."""

    __tablename__ = "stores"
    __table_args__ = (Index("ix_stores_lat_lng", "latitude", "longitude"),)

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(200))
    # Indexed but not unique: collisions are resolved by suffixing.
    slug: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str | None] = mapped_column(Text)

    # Location (GeoJSON Point order on the wire: [longitude, latitude])
    longitude: Mapped[float] = mapped_column()
    latitude: Mapped[float] = mapped_column()
    address: Mapped[str] = mapped_column(String(500))

    photo: Mapped[str | None] = mapped_column(String(255))

    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    author: Mapped["User"] = relationship(lazy="raise")

    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

    tag_rows: Mapped[list[StoreTag]] = relationship(
        order_by=StoreTag.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]

    def __repr__(self) -> str:
        return f"<Store {self.slug}>"


def build_tag_rows(tags: list[str]) -> list[StoreTag]:
    """Tag rows for a store, positions following list order."""
    return [StoreTag(position=i, tag=tag) for i, tag in enumerate(tags)]
