"""
isorings: 矩形グリッドのサンプルから Marching Squares で等値リング / 等値ポリゴンを計算する。

使い方::

    from isorings import ContourBuilder

    builder = ContourBuilder(10, 10, smooth=False)
    [contour] = builder.contours(values, [0.5])
    for polygon in contour.polygons:
        polygon.exterior, polygon.holes
"""

from __future__ import annotations

from isorings.core.contour_builder import ContourBuilder
from isorings.core.errors import (
    FragmentStoreError,
    GridDimensionError,
    OpenRingError,
    UnmatchedHoleError,
)
from isorings.core.isoring import IsoRingBuilder, contour_rings
from isorings.core.polygons import Contour, Polygon, Ring
from isorings.core.runtime_config import runtime_config, set_config_path

__all__ = [
    "Contour",
    "ContourBuilder",
    "FragmentStoreError",
    "GridDimensionError",
    "IsoRingBuilder",
    "OpenRingError",
    "Polygon",
    "Ring",
    "UnmatchedHoleError",
    "contour_rings",
    "runtime_config",
    "set_config_path",
]
