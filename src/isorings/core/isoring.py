"""
どこで: `src/isorings/core/isoring.py`。
何を: 1 つの閾値についてグリッドを Marching Squares で走査し、線分を縫合して閉リング列を返す。
なぜ: 外周/穴の分類や平滑化とは切り離し、生の等値リングだけを欲しい呼び出し側にも使えるようにするため。

処理の全体像
------------
1. 各セルの 4 隅を `sample >= threshold` で 2 値化し、4bit コードを作る（numba）
   - グリッド外の隅は「閾値未満」とみなす
   - 先頭行（y = -1）/ 中間行 / 最終行（y = dy - 1）で参照できる隅が異なる
2. コード配列を行優先で走査し、`CASES` の線分を `FragmentStore.stitch()` へ渡す
3. 走査終了時に残った断片を `open_fragments` 方針で処理する
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import numpy as np
from numba import njit  # type: ignore[import-untyped]

from isorings.core.cases import CASES, EMPTY_CODES, Segment
from isorings.core.errors import GridDimensionError, OpenRingError
from isorings.core.fragments import FragmentStore
from isorings.core.runtime_config import OPEN_FRAGMENT_CHOICES

logger = logging.getLogger(__name__)


@njit(cache=True)
def _classify_cells_numba(values: np.ndarray, threshold: float, dx: int, dy: int) -> np.ndarray:
    """全セルの 4bit コードを返す。

    戻り値は shape `(dy + 1, dx + 1)` の uint8 配列で、`codes[y + 1, x + 1]` が
    セル (x, y)（`-1 <= x < dx`, `-1 <= y < dy`）のコード。

    Notes
    -----
    ビットは `t0 | t1 << 1 | t2 << 2 | t3 << 3` で、
    t0=(x, y+1), t1=(x+1, y+1), t2=(x+1, y), t3=(x, y) の隅に対応する。
    """

    codes = np.zeros((dy + 1, dx + 1), dtype=np.uint8)

    # 先頭行（y = -1）: 上側の隅 t2, t3 はグリッド外。
    t1 = 1 if values[0] >= threshold else 0
    codes[0, 0] = t1 << 1
    for x in range(0, dx - 1):
        t0 = t1
        t1 = 1 if values[x + 1] >= threshold else 0
        codes[0, x + 1] = t0 | (t1 << 1)
    codes[0, dx] = t1

    # 中間行。
    for y in range(0, dy - 1):
        t1 = 1 if values[y * dx + dx] >= threshold else 0
        t2 = 1 if values[y * dx] >= threshold else 0
        codes[y + 1, 0] = (t1 << 1) | (t2 << 2)
        for x in range(0, dx - 1):
            t0 = t1
            t1 = 1 if values[y * dx + dx + x + 1] >= threshold else 0
            t3 = t2
            t2 = 1 if values[y * dx + x + 1] >= threshold else 0
            codes[y + 1, x + 1] = t0 | (t1 << 1) | (t2 << 2) | (t3 << 3)
        codes[y + 1, dx] = t1 | (t2 << 3)

    # 最終行（y = dy - 1）: 下側の隅 t0, t1 はグリッド外。
    y = dy - 1
    t2 = 1 if values[y * dx] >= threshold else 0
    codes[dy, 0] = t2 << 2
    for x in range(0, dx - 1):
        t3 = t2
        t2 = 1 if values[y * dx + x + 1] >= threshold else 0
        codes[dy, x + 1] = (t2 << 2) | (t3 << 3)
    codes[dy, dx] = t2 << 3

    return codes


def as_flat_values(values: Sequence[float] | np.ndarray, dx: int, dy: int) -> np.ndarray:
    """サンプル列を行優先の 1 次元 float64 配列にして返す。

    Raises
    ------
    GridDimensionError
        要素数が `dx * dy` と一致しない場合。
    """

    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if int(arr.size) != int(dx) * int(dy):
        raise GridDimensionError(
            f"サンプル数が dx*dy と一致しません: size={arr.size}, dx={dx}, dy={dy}"
        )
    return np.ascontiguousarray(arr)


def check_open_fragment_policy(policy: str) -> str:
    s = str(policy)
    if s not in OPEN_FRAGMENT_CHOICES:
        raise ValueError(
            f"open_fragments は {OPEN_FRAGMENT_CHOICES} のいずれかである必要があります: got={policy!r}"
        )
    return s


class IsoRingBuilder:
    """閾値ごとの等値リングを計算する。

    Parameters
    ----------
    dx, dy : int
        グリッドの列数 / 行数（どちらも 1 以上）。
    open_fragments : str, default "drop"
        走査終了時に残った断片の扱い。
        `"drop"` は捨てる（warning ログ）、`"close"` は先頭点を足して閉じる、
        `"error"` は `OpenRingError` を送出する。

    Notes
    -----
    同じインスタンスを複数の閾値で使い回せる。断片ストアは各 `compute()` の先頭で空にする。
    """

    def __init__(self, dx: int, dy: int, *, open_fragments: str = "drop") -> None:
        dx_i = int(dx)
        dy_i = int(dy)
        if dx_i < 1 or dy_i < 1:
            raise ValueError(f"dx, dy は 1 以上である必要があります: dx={dx}, dy={dy}")
        self.dx = dx_i
        self.dy = dy_i
        self.open_fragments = check_open_fragment_policy(open_fragments)
        self._store = FragmentStore(dx_i)
        self._is_empty = True

    def classify(self, values: np.ndarray, threshold: float) -> np.ndarray:
        """セルコード配列（shape `(dy + 1, dx + 1)`）を返す。"""

        flat = as_flat_values(values, self.dx, self.dy)
        return _classify_cells_numba(flat, float(threshold), self.dx, self.dy)

    def _segments(self, codes: np.ndarray) -> Iterator[tuple[Segment, int, int]]:
        # 0 / 15 は線分を作らないので、最初から走査対象にしない。
        # np.nonzero は行優先で返すため、走査順（上の行から、左から右）は保たれる。
        active = np.ones(codes.shape, dtype=np.bool_)
        for code in EMPTY_CODES:
            active &= codes != code
        rows, cols = np.nonzero(active)
        for j, i in zip(rows.tolist(), cols.tolist()):
            x = i - 1
            y = j - 1
            for segment in CASES[int(codes[j, i])]:
                yield segment, x, y

    def compute(self, values: Sequence[float] | np.ndarray, threshold: float) -> list[np.ndarray]:
        """`threshold` 以上の領域を囲む閉リング列を返す。

        Parameters
        ----------
        values : Sequence[float] or np.ndarray
            行優先の `dx * dy` 個のサンプル。
        threshold : float
            閾値（`>=` で内側）。

        Returns
        -------
        list[np.ndarray]
            shape `(N, 2)` の閉リング列（先頭点と末尾点が一致）。閉じた順に並ぶ。

        Raises
        ------
        GridDimensionError
            サンプル数が `dx * dy` と一致しない場合。
        OpenRingError
            `open_fragments="error"` で、閉じない断片が残った場合。
        """

        if not self._is_empty:
            self._store.reset()
            self._is_empty = True

        codes = self.classify(values, threshold)
        result: list[np.ndarray] = []
        self._is_empty = False
        self._store.stitch_all(self._segments(codes), result)

        if len(self._store) > 0:
            self._handle_open_fragments(result, float(threshold))
        return result

    def _handle_open_fragments(self, result: list[np.ndarray], threshold: float) -> None:
        leftovers = self._store.open_rings()
        if self.open_fragments == "error":
            raise OpenRingError(
                f"閉じていない断片が残りました: threshold={threshold}, count={len(leftovers)}"
            )
        if self.open_fragments == "close":
            logger.warning(
                "閉じていない断片を自動で閉じます: threshold=%s, count=%d",
                threshold,
                len(leftovers),
            )
            for pts in leftovers:
                result.append(np.concatenate([pts, pts[:1]], axis=0))
        else:
            logger.warning(
                "閉じていない断片を破棄します: threshold=%s, count=%d",
                threshold,
                len(leftovers),
            )
        self._store.reset()
        self._is_empty = True


def contour_rings(
    values: Sequence[float] | np.ndarray,
    threshold: float,
    dx: int,
    dy: int,
) -> list[np.ndarray]:
    """グリッドと単一の閾値から、閉リング列だけを返す。

    外周/穴の分類や平滑化は行わない。
    """

    return IsoRingBuilder(dx, dy).compute(values, threshold)
