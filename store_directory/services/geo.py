"""PostGIS expressions for the map (near) query.

Stores keep plain latitude/longitude columns; the geography point is built
from them in SQL, matching the functional GiST index `ix_stores_geog`
created by the initial migration. Distances are meters on the WGS 84
spheroid (PostGIS geography semantics).
"""

from geoalchemy2 import Geography
from sqlalchemy import cast, func
from sqlalchemy.sql.elements import ColumnElement

from store_directory.models import Store

SRID_WGS84 = 4326


def geography_point(lng: float | ColumnElement, lat: float | ColumnElement) -> ColumnElement:
    """`ST_SetSRID(ST_MakePoint(lng, lat), 4326)::geography`

    The cast is to the unconstrained `geography` type so the expression is
    identical to the one in the index definition.
    """
    return cast(
        func.ST_SetSRID(func.ST_MakePoint(lng, lat), SRID_WGS84),
        Geography(geometry_type=None),
    )


def store_geography() -> ColumnElement:
    """Geography point of a store row."""
    return geography_point(Store.longitude, Store.latitude)


def within_distance(lat: float, lng: float, max_distance_m: float) -> ColumnElement:
    """Index-assisted `ST_DWithin` filter around (lat, lng)."""
    return func.ST_DWithin(store_geography(), geography_point(lng, lat), max_distance_m)


def distance_from(lat: float, lng: float) -> ColumnElement:
    """`ST_Distance` in meters from (lat, lng) to the store."""
    return func.ST_Distance(store_geography(), geography_point(lng, lat))
