"""
どこで: `src/isorings/core/fragments.py`。
何を: 走査中の「まだ閉じていない折れ線（断片）」を端点キーで管理し、線分を縫合してリングへ復元する。
なぜ: 1 パスの走査で、線分が届くたびに O(1)（償却）で延長・併合・閉合を判定するため。

構造
----
- 断片はスロット配列 `_slots` に置き、空きスロットは `_free` に積んで再利用する。
  断片 id（スロット番号）は無関係な削除で変わらないので、辞書の値として安全に使える。
- `_by_start` / `_by_end` は「始点キー → 断片 id」「終点キー → 断片 id」の辞書。
  断片を変更するたびに、2 つの辞書を必ず同時に更新する。
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from isorings.core.cases import Segment
from isorings.core.errors import FragmentStoreError

Point = tuple[float, float]


@dataclass(slots=True)
class Fragment:
    """閉じていない断片。

    Attributes
    ----------
    start : int
        先頭点の端点キー。
    end : int
        末尾点の端点キー。
    points : deque[Point]
        点列。両端から O(1) で伸ばせるよう deque で持つ。
    """

    start: int
    end: int
    points: deque[Point]


class FragmentStore:
    """端点キーで断片を引ける縫合用ストア。

    Parameters
    ----------
    dx : int
        グリッドの列数。端点キーの行ストライドに使う。

    Notes
    -----
    1 回の閾値走査の間だけ使う。次の閾値に移る前に `reset()` で全状態を捨てる。
    """

    def __init__(self, dx: int) -> None:
        # 半整数格子上の点 (x, y) は 0 <= x <= dx なので 2x < 2(dx+1)。
        # y 方向のストライドを 4(dx+1) にすれば、キーは衝突しない。
        self._row_stride = float((int(dx) + 1) * 4)
        self._slots: list[Fragment | None] = []
        self._free: list[int] = []
        self._by_start: dict[int, int] = {}
        self._by_end: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._slots) - len(self._free)

    def key(self, point: Point) -> int:
        """点の端点キー（整数）を返す。"""

        return int(math.floor(point[0] * 2.0 + point[1] * self._row_stride))

    def reset(self) -> None:
        """全断片と索引を破棄する。"""

        self._slots.clear()
        self._free.clear()
        self._by_start.clear()
        self._by_end.clear()

    # --- スロット操作 ---

    def _insert(self, fragment: Fragment) -> int:
        if self._free:
            ix = self._free.pop()
            self._slots[ix] = fragment
        else:
            ix = len(self._slots)
            self._slots.append(fragment)
        self._by_start[fragment.start] = ix
        self._by_end[fragment.end] = ix
        return ix

    def _get(self, ix: int) -> Fragment:
        if ix < 0 or ix >= len(self._slots):
            raise FragmentStoreError(f"断片 id が範囲外です: id={ix}")
        fragment = self._slots[ix]
        if fragment is None:
            raise FragmentStoreError(f"索引が解放済みの断片を指しています: id={ix}")
        return fragment

    def _remove(self, ix: int) -> Fragment:
        fragment = self._get(ix)
        self._slots[ix] = None
        self._free.append(ix)
        return fragment

    # --- 縫合 ---

    def stitch(
        self,
        segment: Segment,
        x: int,
        y: int,
        result: list[np.ndarray],
    ) -> None:
        """セル (x, y) の線分を既存断片へ縫い合わせる。

        Parameters
        ----------
        segment : Segment
            セル相対の有向線分（`CASES` の要素）。
        x, y : int
            セル座標。線分にそのまま加算して絶対座標にする。
        result : list[np.ndarray]
            閉じたリングの追記先。

        Notes
        -----
        判定は以下の優先順:

        1. 線分の始点で終わる断片 f と、線分の終点で始まる断片 g がある
           - f is g: 終点を足して閉合し、`result` へ移す
           - f is not g: f + g を 1 本に併合する（始点は f、終点は g のもの）
        2. f だけある: 末尾に終点を足す
        3. g だけある: 先頭に始点を足す
        4. どちらも無い: 2 点の新しい断片を作る

        Raises
        ------
        FragmentStoreError
            索引が存在しない断片を指していた場合。
        """

        (sx, sy), (ex, ey) = segment
        start = (sx + x, sy + y)
        end = (ex + x, ey + y)
        start_key = self.key(start)
        end_key = self.key(end)

        if start_key in self._by_end:
            f_ix = self._by_end.pop(start_key)
            if end_key in self._by_start:
                g_ix = self._by_start.pop(end_key)
                if f_ix == g_ix:
                    f = self._remove(f_ix)
                    f.points.append(end)
                    result.append(np.asarray(f.points, dtype=np.float64))
                    return
                f = self._remove(f_ix)
                g = self._remove(g_ix)
                f.points.extend(g.points)
                self._insert(Fragment(start=f.start, end=g.end, points=f.points))
                return

            f = self._get(f_ix)
            f.points.append(end)
            f.end = end_key
            self._by_end[end_key] = f_ix
            return

        if end_key in self._by_start:
            # 始点側で一致する断片が無いことは上で確定しているので、ここは併合にならない。
            g_ix = self._by_start.pop(end_key)
            g = self._get(g_ix)
            g.points.appendleft(start)
            g.start = start_key
            self._by_start[start_key] = g_ix
            return

        self._insert(Fragment(start=start_key, end=end_key, points=deque((start, end))))

    def open_rings(self) -> list[np.ndarray]:
        """残っている断片の点列を、スロット番号順に返す。

        Notes
        -----
        空きスロットを再利用するため、スロット順は作成順と一致するとは限らない。
        """

        return [
            np.asarray(f.points, dtype=np.float64) for f in self._slots if f is not None
        ]

    def stitch_all(
        self,
        segments: Iterable[tuple[Segment, int, int]],
        result: list[np.ndarray],
    ) -> None:
        """`(segment, x, y)` 列を順に `stitch()` する。"""

        for segment, x, y in segments:
            self.stitch(segment, x, y, result)
