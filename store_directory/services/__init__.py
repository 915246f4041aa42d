"""Business logic called by the routers.

Each service module opens its own session via `get_session()` and returns
pydantic schemas (or ORM users for the auth dependency), never live ORM
objects tied to an open session.
"""
