"""API routes."""

from fastapi import APIRouter

from store_directory.routes import account, auth, reviews, stores, tags

api_router = APIRouter()

# Accounts and login
api_router.include_router(auth.router, prefix="/v1/auth", tags=["auth"])
api_router.include_router(account.router, prefix="/v1/account", tags=["account"])

# Stores (listing, write path, search, map, hearts)
api_router.include_router(stores.router, prefix="/v1/stores", tags=["stores"])

# Reports (tag histogram, top stores)
api_router.include_router(tags.router, prefix="/v1", tags=["reports"])

# Reviews
api_router.include_router(reviews.router, prefix="/v1/reviews", tags=["reviews"])
