"""Review model.

A rating (1-5) plus text left by a user on a store. Consumed by the
store detail view and the top-stores aggregation.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from store_directory.models.store import utcnow
from store_directory.stores.postgres import Base

if TYPE_CHECKING:
    from store_directory.models.user import User


class Review(Base):
    """User review of a store."""

    __tablename__ = "reviews"
    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),)

    id: Mapped[int] = mapped_column(primary_key=True)

    store_id: Mapped[int] = mapped_column(ForeignKey("stores.id", ondelete="CASCADE"), index=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    author: Mapped["User"] = relationship(lazy="raise")

    text: Mapped[str] = mapped_column(Text)
    rating: Mapped[int] = mapped_column()

    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<Review store={self.store_id} rating={self.rating}>"
