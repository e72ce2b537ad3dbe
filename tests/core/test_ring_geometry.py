"""
どこで: `tests/core/test_ring_geometry.py`。
何を: 符号付き面積と、点/リングの包含判定を検証する。
"""

from __future__ import annotations

import numpy as np

from isorings.core.ring_geometry import point_in_ring, ring_area, ring_contains

# y 下向きの座標系で外周と同じ向きに回る正方形。
SQUARE = np.array(
    [[4.0, 0.0], [0.0, 0.0], [0.0, 4.0], [4.0, 4.0], [4.0, 0.0]], dtype=np.float64
)


def test_ring_area_sign_and_magnitude() -> None:
    assert ring_area(SQUARE) == 16.0
    assert ring_area(SQUARE[::-1]) == -16.0


def test_ring_area_ignores_closing_point() -> None:
    assert ring_area(SQUARE[:-1]) == ring_area(SQUARE)


def test_ring_area_degenerate() -> None:
    assert ring_area(np.zeros((0, 2))) == 0.0
    assert ring_area(np.array([[0.0, 0.0], [1.0, 1.0]])) == 0.0


def test_point_in_ring() -> None:
    square = SQUARE[:-1].tolist()
    assert point_in_ring(square, [2.0, 2.0]) == 1
    assert point_in_ring(square, [5.0, 2.0]) == -1
    assert point_in_ring(square, [0.0, 2.0]) == 0
    assert point_in_ring(square, [4.0, 4.0]) == 0


def test_ring_contains_inner_ring() -> None:
    hole = np.array([[2.0, 1.0], [1.0, 2.0], [2.0, 3.0], [3.0, 2.0], [2.0, 1.0]])
    assert ring_contains(SQUARE, hole) == 1


def test_ring_contains_outside_ring() -> None:
    other = SQUARE + 10.0
    assert ring_contains(SQUARE, other) == -1


def test_ring_contains_skips_boundary_points() -> None:
    # 先頭点は外周上、2 点目で内側と判定される。
    hole = np.array([[0.0, 2.0], [1.0, 1.0], [1.0, 3.0], [0.0, 2.0]])
    assert ring_contains(SQUARE, hole) == 1


def test_ring_contains_all_on_boundary() -> None:
    assert ring_contains(SQUARE, SQUARE) == 0
