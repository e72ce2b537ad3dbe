# どこで: `src/isorings/core/ring_geometry.py`。
# 何を: リングの符号付き面積と、リング同士の包含判定を提供する。
# なぜ: 縫合済みリングを外周と穴に分け、穴を正しい外周へ入れ子にするため。

from __future__ import annotations

import numpy as np


def ring_area(ring: np.ndarray) -> float:
    """リングの符号付き面積を返す。

    Notes
    -----
    y 軸下向き（グリッド行が下へ増える）座標系で、`CASES` の向きに沿ったリングは
    外周が正、穴が 0 以下になるよう符号を取る。
    閉じ点（末尾 == 先頭）が重複していても結果は変わらない。
    """

    pts = np.asarray(ring, dtype=np.float64)
    if pts.shape[0] < 3:
        return 0.0
    x = pts[:, 0]
    y = pts[:, 1]
    twice = np.sum(np.roll(y, 1) * x - np.roll(x, 1) * y)
    return float(twice) * 0.5


def _collinear(a: list[float], b: list[float], c: list[float]) -> bool:
    return (b[0] - a[0]) * (c[1] - a[1]) == (c[0] - a[0]) * (b[1] - a[1])


def _within(p: float, q: float, r: float) -> bool:
    return (p <= q <= r) or (r <= q <= p)


def _segment_contains(a: list[float], b: list[float], c: list[float]) -> bool:
    # 垂直な辺は y で、それ以外は x で範囲を見る。
    i = 1 if a[0] == b[0] else 0
    return _collinear(a, b, c) and _within(a[i], c[i], b[i])


def point_in_ring(ring: list[list[float]], point: list[float]) -> int:
    """点の位置を返す（内側 1 / 境界上 0 / 外側 -1）。偶奇規則。"""

    x, y = point[0], point[1]
    contains = -1
    n = len(ring)
    j = n - 1
    for i in range(n):
        pi = ring[i]
        pj = ring[j]
        if _segment_contains(pi, pj, point):
            return 0
        xi, yi = pi[0], pi[1]
        xj, yj = pj[0], pj[1]
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            contains = -contains
        j = i
    return contains


def ring_contains(ring: np.ndarray, hole: np.ndarray) -> int:
    """`hole` が `ring` に含まれるかを返す（内側 1 / 判定不能 0 / 外側 -1）。

    `hole` の点を先頭から順に調べ、境界上ではない最初の点の結果を返す。
    全点が境界上なら 0 を返す。
    """

    outer = np.asarray(ring, dtype=np.float64).tolist()
    if len(outer) > 1 and outer[0] == outer[-1]:
        # 長さ 0 の閉じ辺は、同じ y の点をすべて「境界上」と誤判定させる。
        outer = outer[:-1]
    for point in np.asarray(hole, dtype=np.float64).tolist():
        c = point_in_ring(outer, point)
        if c != 0:
            return c
    return 0
