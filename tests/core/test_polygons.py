"""
どこで: `tests/core/test_polygons.py`。
何を: Polygon / Contour の検証・不変性・座標出力を確認する。
"""

from __future__ import annotations

import numpy as np
import pytest

from isorings.core.polygons import Contour, Polygon, as_ring

RING = [[1.0, 0.5], [0.5, 0.0], [0.0, 0.5], [0.5, 1.0], [1.0, 0.5]]


def test_as_ring_returns_readonly_copy() -> None:
    src = np.array(RING)
    ring = as_ring(src, context="test")

    assert ring.dtype == np.float64
    assert not ring.flags.writeable
    assert src.flags.writeable
    with pytest.raises(ValueError):
        ring[0, 0] = 9.0


def test_as_ring_rejects_bad_shape() -> None:
    with pytest.raises(ValueError):
        as_ring([1.0, 2.0, 3.0], context="test")
    with pytest.raises(ValueError):
        as_ring([[1.0, 2.0, 3.0]], context="test")


def test_polygon_rings_and_coordinates() -> None:
    hole = [[0.5, 0.25], [0.25, 0.5], [0.5, 0.25]]
    poly = Polygon(exterior=RING, holes=(hole,))

    assert len(poly.rings) == 2
    assert poly.to_coordinates() == [RING, hole]


def test_contour_validates_polygons() -> None:
    with pytest.raises(TypeError):
        Contour(threshold=0.5, polygons=(RING,))  # type: ignore[arg-type]


def test_contour_coordinates_and_empty() -> None:
    empty = Contour(threshold=1)
    assert empty.is_empty
    assert isinstance(empty.threshold, float)
    assert empty.to_coordinates() == []

    c = Contour(threshold=0.5, polygons=[Polygon(exterior=RING)])
    assert not c.is_empty
    assert c.to_coordinates() == [[RING]]
