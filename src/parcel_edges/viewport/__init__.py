"""
Viewport spatial index
"""

from .index import (
    Bounds,
    ParcelViewportIndex,
    build_viewport_index,
    query_parcels_in_bounds,
    max_parcels_for_zoom,
    render_parcels,
)

__all__ = [
    "Bounds",
    "ParcelViewportIndex",
    "build_viewport_index",
    "query_parcels_in_bounds",
    "max_parcels_for_zoom",
    "render_parcels",
]
