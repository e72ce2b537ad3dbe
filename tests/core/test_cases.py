"""
どこで: `tests/core/test_cases.py`。
何を: Marching Squares のケース表の形と向きを検証する。
なぜ: 表の 1 要素のずれが、縫合と外周/穴判定の両方を壊すため。
"""

from __future__ import annotations

from isorings.core.cases import CASES, EMPTY_CODES

# 対角の 2 隅だけが閾値以上のコード。
SADDLE_CODES = (5, 10)


def test_cases_has_16_entries() -> None:
    assert len(CASES) == 16


def test_empty_and_saddle_codes() -> None:
    for code in range(16):
        n = len(CASES[code])
        if code in EMPTY_CODES:
            assert n == 0
        elif code in SADDLE_CODES:
            assert n == 2
        else:
            assert n == 1


def test_segment_endpoints_are_edge_midpoints() -> None:
    for segments in CASES:
        for start, end in segments:
            for px, py in (start, end):
                assert px in (0.5, 1.0, 1.5)
                assert py in (0.5, 1.0, 1.5)
                # 辺の中点はちょうど一方の座標が 1.0 になる。
                assert (px == 1.0) != (py == 1.0)
            assert start != end


def test_complementary_codes_reverse_direction() -> None:
    # 内外が反転したコードは、同じ辺を逆向きに通る。
    for code in range(1, 15):
        if code in SADDLE_CODES:
            continue
        (a, b), = CASES[code]
        (c, d), = CASES[15 - code]
        assert (a, b) == (d, c)
