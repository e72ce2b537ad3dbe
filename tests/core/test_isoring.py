"""
どこで: `tests/core/test_isoring.py`。
何を: セル分類と IsoRingBuilder（走査 + 縫合 + 開いた断片の扱い）を検証する。
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from isorings.core.errors import GridDimensionError, OpenRingError
from isorings.core.isoring import IsoRingBuilder, as_flat_values, contour_rings
from isorings.core.ring_geometry import ring_area
from isorings.core.runtime_config import OPEN_FRAGMENT_CHOICES

ZEROS = np.zeros(100)

BLOCK = np.zeros((10, 10))
BLOCK[3:8, 3:6] = 1.0

BLOCK_OUTER_RING = [
    [6.0, 7.5], [6.0, 6.5], [6.0, 5.5], [6.0, 4.5], [6.0, 3.5],
    [5.5, 3.0], [4.5, 3.0], [3.5, 3.0],
    [3.0, 3.5], [3.0, 4.5], [3.0, 5.5], [3.0, 6.5], [3.0, 7.5],
    [3.5, 8.0], [4.5, 8.0], [5.5, 8.0], [6.0, 7.5],
]


def _lone_segment(codes: np.ndarray):
    yield ((0.5, 1.0), (1.0, 0.5)), 0, 0


def test_classify_codes_for_diagonal_pair() -> None:
    builder = IsoRingBuilder(2, 2)
    codes = builder.classify(np.array([1.0, 0.0, 0.0, 1.0]), 0.5)

    assert codes.shape == (3, 3)
    np.testing.assert_array_equal(codes, [[2, 1, 0], [4, 10, 1], [0, 4, 8]])


def test_classify_accepts_2d_grid() -> None:
    builder = IsoRingBuilder(2, 2)
    codes = builder.classify(np.array([[1.0, 0.0], [0.0, 1.0]]), 0.5)
    assert int(codes[1, 1]) == 10


def test_all_below_threshold_gives_no_rings() -> None:
    assert contour_rings(ZEROS, 0.5, 10, 10) == []


def test_single_sample_grid() -> None:
    (ring,) = contour_rings([1.0], 0.5, 1, 1)
    np.testing.assert_array_equal(
        ring, [[1.0, 0.5], [0.5, 0.0], [0.0, 0.5], [0.5, 1.0], [1.0, 0.5]]
    )
    assert ring_area(ring) > 0.0


def test_threshold_is_inclusive() -> None:
    assert len(contour_rings([0.0, 0.5, 0.0], 0.5, 3, 1)) == 1
    assert contour_rings([0.0, 0.4999, 0.0], 0.5, 3, 1) == []


def test_single_row_and_single_column_grids() -> None:
    (row,) = contour_rings([1.0, 1.0, 1.0], 0.5, 3, 1)
    (col,) = contour_rings([1.0, 1.0, 1.0], 0.5, 1, 3)
    assert row.shape == col.shape
    np.testing.assert_array_equal(row[0], row[-1])
    np.testing.assert_array_equal(col[0], col[-1])


def test_block_ring_matches_reference() -> None:
    (ring,) = contour_rings(BLOCK, 0.5, 10, 10)
    np.testing.assert_array_equal(ring, BLOCK_OUTER_RING)


def test_saddle_keeps_diagonal_samples_apart() -> None:
    rings = contour_rings([1.0, 0.0, 0.0, 1.0], 0.5, 2, 2)
    assert len(rings) == 2
    assert all(ring_area(r) > 0.0 for r in rings)


def test_nan_samples_count_as_below_threshold() -> None:
    values = np.array(BLOCK, dtype=np.float64)
    values[values == 0.0] = np.nan
    (ring,) = contour_rings(values, 0.5, 10, 10)
    np.testing.assert_array_equal(ring, BLOCK_OUTER_RING)


def test_random_grids_close_every_ring() -> None:
    rng = np.random.default_rng(1234)
    dx, dy = 13, 9
    values = rng.random(dx * dy)
    builder = IsoRingBuilder(dx, dy, open_fragments="error")

    for threshold in (0.2, 0.5, 0.8):
        rings = builder.compute(values, threshold)
        assert rings
        for ring in rings:
            assert ring.shape[0] >= 4
            np.testing.assert_array_equal(ring[0], ring[-1])
        assert len(builder._store) == 0


def test_builder_is_reusable_across_thresholds() -> None:
    builder = IsoRingBuilder(10, 10)
    first = builder.compute(BLOCK, 0.5)
    builder.compute(ZEROS, 0.5)
    again = builder.compute(BLOCK, 0.5)

    assert len(first) == len(again) == 1
    np.testing.assert_array_equal(first[0], again[0])


def test_dimension_mismatch_raises() -> None:
    with pytest.raises(GridDimensionError):
        contour_rings([0.0] * 99, 0.5, 10, 10)
    with pytest.raises(ValueError):
        as_flat_values([0.0, 1.0, 2.0], 2, 2)


def test_policies_match_config_choices() -> None:
    for policy in OPEN_FRAGMENT_CHOICES:
        assert IsoRingBuilder(3, 3, open_fragments=policy).open_fragments == policy


def test_invalid_dimensions_and_policy_raise() -> None:
    with pytest.raises(ValueError):
        IsoRingBuilder(0, 3)
    with pytest.raises(ValueError):
        IsoRingBuilder(3, 3, open_fragments="keep")


def test_open_fragment_dropped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    builder = IsoRingBuilder(2, 2, open_fragments="drop")
    builder._segments = _lone_segment  # type: ignore[method-assign]

    with caplog.at_level(logging.WARNING, logger="isorings.core.isoring"):
        rings = builder.compute([0.0] * 4, 0.5)

    assert rings == []
    assert len(builder._store) == 0
    assert any("破棄" in r.getMessage() for r in caplog.records)


def test_open_fragment_closed() -> None:
    builder = IsoRingBuilder(2, 2, open_fragments="close")
    builder._segments = _lone_segment  # type: ignore[method-assign]

    (ring,) = builder.compute([0.0] * 4, 0.5)

    np.testing.assert_array_equal(ring, [[0.5, 1.0], [1.0, 0.5], [0.5, 1.0]])


def test_open_fragment_error() -> None:
    builder = IsoRingBuilder(2, 2, open_fragments="error")
    builder._segments = _lone_segment  # type: ignore[method-assign]

    with pytest.raises(OpenRingError):
        builder.compute([0.0] * 4, 0.5)
