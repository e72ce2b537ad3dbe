from __future__ import annotations

from isorings.export.geojson import (
    GeoJSONParams,
    contour_to_feature,
    contours_to_feature_collection,
    dumps_geojson,
    export_geojson,
)

__all__ = [
    "GeoJSONParams",
    "contour_to_feature",
    "contours_to_feature_collection",
    "dumps_geojson",
    "export_geojson",
]
