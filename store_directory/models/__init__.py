"""SQLAlchemy ORM models.

Models represent database tables:
- users: Registered accounts (+ user_hearts association)
- stores: Directory listings (+ store_tags, one row per tag element)
- reviews: Ratings left on stores
"""

from store_directory.models.store import Store, StoreTag, build_tag_rows
from store_directory.models.review import Review
from store_directory.models.user import User, user_hearts

__all__ = ["Review", "Store", "StoreTag", "User", "build_tag_rows", "user_hearts"]
