"""
どこで: `src/isorings/core/cases.py`。
何を: Marching Squares の 16 ケース表（4bit コード → 0〜2 本の有向線分）を定義する。
なぜ: セル分類の結果を「表引き + 線分ループ」だけで処理できるようにするため。
"""

from __future__ import annotations

Segment = tuple[tuple[float, float], tuple[float, float]]
"""セル相対の有向線分 `((x0, y0), (x1, y1))`。"""

# コードのビット割り当て（セル (x, y) の 4 隅）:
#   bit0: (x, y+1)   bit1: (x+1, y+1)   bit2: (x+1, y)   bit3: (x, y)
#
# 座標は (-0.5, -0.5) だけずらした単位正方形上の値（0.5 / 1.0 / 1.5 のみ）。
# セル (x, y) を足すと、辺の中点に載った絶対グリッド座標になる。
# 向きは「閾値以上の側が常に同じ側に来る」ように固定してある。
# この向きが崩れると符号付き面積による外周/穴の判定が壊れる。
CASES: tuple[tuple[Segment, ...], ...] = (
    (),
    (((1.0, 1.5), (0.5, 1.0)),),
    (((1.5, 1.0), (1.0, 1.5)),),
    (((1.5, 1.0), (0.5, 1.0)),),
    (((1.0, 0.5), (1.5, 1.0)),),
    (
        ((1.0, 1.5), (0.5, 1.0)),
        ((1.0, 0.5), (1.5, 1.0)),
    ),
    (((1.0, 0.5), (1.0, 1.5)),),
    (((1.0, 0.5), (0.5, 1.0)),),
    (((0.5, 1.0), (1.0, 0.5)),),
    (((1.0, 1.5), (1.0, 0.5)),),
    (
        ((0.5, 1.0), (1.0, 0.5)),
        ((1.5, 1.0), (1.0, 1.5)),
    ),
    (((1.5, 1.0), (1.0, 0.5)),),
    (((0.5, 1.0), (1.5, 1.0)),),
    (((1.0, 1.5), (1.5, 1.0)),),
    (((0.5, 1.0), (1.0, 1.5)),),
    (),
)

EMPTY_CODES = frozenset({0, 15})
