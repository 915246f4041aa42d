#!/usr/bin/env python3
"""Seed database with sample data.

Creates:
- Sample users (password: "password")
- Stores with tags and locations, owned by those users
- Reviews, so the top-stores report has something to rank

Stores and reviews go through the services, so slugs are generated exactly
as in the API. The script is idempotent per user: a user that already
exists is left alone together with their stores.

Usage:
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from store_directory.exceptions import ConflictError
from store_directory.models import User
from store_directory.schemas import Location, RegisterRequest, ReviewCreate, StoreCreate
from store_directory.services.auth import authenticate, register_user
from store_directory.services.reviews import add_review
from store_directory.services.stores import create_store
from store_directory.stores.postgres import close_db, create_tables, init_db

load_dotenv()

# ============================================================
# Sample data
# ============================================================

USERS = [
    {"name": "Wes Bos", "email": "wes@example.com"},
    {"name": "Debbie Downer", "email": "debbie@example.com"},
    {"name": "Beau", "email": "beau@example.com"},
]

# coordinates are [longitude, latitude]
STORES = [
    {
        "owner": "wes@example.com",
        "name": "Hamilton Farmers Market",
        "description": "Local produce, baked goods and coffee under one roof.",
        "tags": ["Family Friendly", "Vegetarian", "Open Late"],
        "coordinates": [-79.8695, 43.2581],
        "address": "35 York Blvd, Hamilton, ON",
    },
    {
        "owner": "wes@example.com",
        "name": "Joe's Pizza",
        "description": "Thin crust pizza by the slice.",
        "tags": ["Open Late", "Licensed"],
        "coordinates": [-79.8711, 43.2557],
        "address": "12 King St W, Hamilton, ON",
    },
    {
        "owner": "debbie@example.com",
        "name": "Joe's Pizza",
        "description": "Wood-fired pizza and craft beer.",
        "tags": ["Licensed", "Wifi"],
        "coordinates": [-79.8620, 43.2503],
        "address": "200 James St N, Hamilton, ON",
    },
    {
        "owner": "debbie@example.com",
        "name": "Mulberry Coffeehouse",
        "description": "Coffee, tea and sandwiches in a historic building.",
        "tags": ["Wifi", "Vegetarian", "Family Friendly"],
        "coordinates": [-79.8679, 43.2646],
        "address": "193 James St N, Hamilton, ON",
    },
    {
        "owner": "beau@example.com",
        "name": "Bread Bar",
        "description": "Pizza, pasta and fresh bread.",
        "tags": ["Licensed", "Family Friendly"],
        "coordinates": [-79.8833, 43.2564],
        "address": "258 Locke St S, Hamilton, ON",
    },
]

# (index into STORES, reviewer email, rating, text)
REVIEWS = [
    (0, "debbie@example.com", 5, "Great selection on Saturdays."),
    (0, "beau@example.com", 4, "Busy but worth it."),
    (1, "debbie@example.com", 3, "Decent slice."),
    (1, "beau@example.com", 5, "Best late-night pizza in town."),
    (3, "wes@example.com", 5, "Lovely place to work from."),
    (3, "beau@example.com", 4, "Good coffee, slow wifi."),
    (4, "wes@example.com", 2, "Too loud."),
]

PASSWORD = "password"


async def seed_users() -> dict[str, User]:
    """Register sample users; returns email -> user (new users only)."""
    created = {}
    for u in USERS:
        try:
            user = await register_user(
                RegisterRequest(
                    name=u["name"],
                    email=u["email"],
                    password=PASSWORD,
                    password_confirm=PASSWORD,
                )
            )
        except ConflictError:
            print(f"  ⏭️  {u['email']} (exists)")
            continue
        created[u["email"]] = user
        print(f"  ✅ {u['email']}")
    return created


async def seed_database() -> None:
    await init_db()
    try:
        await create_tables()

        print("👤 Users")
        new_users = await seed_users()

        print("🏪 Stores")
        store_ids: dict[int, int] = {}
        for index, s in enumerate(STORES):
            owner = new_users.get(s["owner"])
            if owner is None:
                print(f"  ⏭️  {s['name']} (owner already seeded)")
                continue
            store = await create_store(
                owner,
                StoreCreate(
                    name=s["name"],
                    description=s["description"],
                    tags=s["tags"],
                    location=Location(coordinates=s["coordinates"], address=s["address"]),
                ),
            )
            store_ids[index] = store.id
            print(f"  ✅ {store.name} -> /{store.slug}")

        print("⭐ Reviews")
        for index, email, rating, text in REVIEWS:
            if index not in store_ids:
                continue
            reviewer = await authenticate(email, PASSWORD)
            await add_review(store_ids[index], reviewer, ReviewCreate(text=text, rating=rating))
            print(f"  ✅ {STORES[index]['name']}: {rating}★ by {email}")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(seed_database())
