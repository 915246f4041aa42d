"""initial_schema

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "1a2b3c4d5e6f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS postgis")

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("password_hash", sa.String(length=256), nullable=False),
        sa.Column("reset_password_token", sa.String(length=64), nullable=True),
        sa.Column("reset_password_expires", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_reset_password_token"), "users", ["reset_password_token"], unique=False)

    op.create_table(
        "stores",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=False),
        sa.Column("photo", sa.String(length=255), nullable=True),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    # Not unique: slug collisions are resolved by suffixing at write time.
    op.create_index(op.f("ix_stores_slug"), "stores", ["slug"], unique=False)
    op.create_index(op.f("ix_stores_author_id"), "stores", ["author_id"], unique=False)
    op.create_index(op.f("ix_stores_created"), "stores", ["created"], unique=False)
    op.create_index("ix_stores_lat_lng", "stores", ["latitude", "longitude"], unique=False)
    # Matches services.geo.store_geography() so ST_DWithin can use it.
    op.execute(
        "CREATE INDEX ix_stores_geog ON stores USING gist "
        "((ST_SetSRID(ST_MakePoint(longitude, latitude), 4326)::geography))"
    )

    op.create_table(
        "store_tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("tag", sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_store_tags_store_id"), "store_tags", ["store_id"], unique=False)
    op.create_index(op.f("ix_store_tags_tag"), "store_tags", ["tag"], unique=False)

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
        sa.ForeignKeyConstraint(["author_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_reviews_store_id"), "reviews", ["store_id"], unique=False)
    op.create_index(op.f("ix_reviews_author_id"), "reviews", ["author_id"], unique=False)

    op.create_table(
        "user_hearts",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "store_id"),
    )


def downgrade() -> None:
    op.drop_table("user_hearts")
    op.drop_index(op.f("ix_reviews_author_id"), table_name="reviews")
    op.drop_index(op.f("ix_reviews_store_id"), table_name="reviews")
    op.drop_table("reviews")
    op.drop_index(op.f("ix_store_tags_tag"), table_name="store_tags")
    op.drop_index(op.f("ix_store_tags_store_id"), table_name="store_tags")
    op.drop_table("store_tags")
    op.execute("DROP INDEX IF EXISTS ix_stores_geog")
    op.drop_index("ix_stores_lat_lng", table_name="stores")
    op.drop_index(op.f("ix_stores_created"), table_name="stores")
    op.drop_index(op.f("ix_stores_author_id"), table_name="stores")
    op.drop_index(op.f("ix_stores_slug"), table_name="stores")
    op.drop_table("stores")
    op.drop_index(op.f("ix_users_reset_password_token"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
