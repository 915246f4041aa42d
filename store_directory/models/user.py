"""User model.

Registered account: login email, display name, password hash, password
reset token state and the set of hearted stores.
"""

from datetime import datetime
import hashlib

from sqlalchemy import Column, DateTime, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from store_directory.models.store import Store, utcnow
from store_directory.stores.postgres import Base

user_hearts = Table(
    "user_hearts",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("store_id", ForeignKey("stores.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """Registered user."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    password_hash: Mapped[str] = mapped_column(String(256))

    # Password reset
    reset_password_token: Mapped[str | None] = mapped_column(String(64), index=True)
    reset_password_expires: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Not loaded with the user; services query user_hearts directly.
    hearts: Mapped[list[Store]] = relationship(secondary=user_hearts, lazy="raise")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @property
    def gravatar(self) -> str:
        digest = hashlib.md5(self.email.strip().lower().encode()).hexdigest()
        return f"https://gravatar.com/avatar/{digest}?s=200"

    def __repr__(self) -> str:
        return f"<User {self.email}>"
