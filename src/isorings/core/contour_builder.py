"""
どこで: `src/isorings/core/contour_builder.py`。
何を: 閾値ごとに等値リングを計算し、外周/穴へ分類・入れ子化・平滑化して `Contour` 列を返す。
なぜ: 生リング（`IsoRingBuilder`）から、描画や GeoJSON 出力にそのまま使えるポリゴン集合を作るため。

処理の全体像（閾値 1 つ分）
--------------------------
1. `IsoRingBuilder.compute()` で閉リング列を得る
2. 符号付き面積が正のリングを外周、0 以下を穴とする
3. 各穴を「それを含む最初の外周」へ割り当てる
4. `smooth=True` なら全リングを線形補間で平滑化する
5. 閾値と Polygon 列を `Contour` に詰める
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from isorings.core.errors import UnmatchedHoleError
from isorings.core.isoring import IsoRingBuilder, as_flat_values, check_open_fragment_policy
from isorings.core.polygons import Contour, Polygon, Ring
from isorings.core.ring_geometry import ring_area, ring_contains
from isorings.core.runtime_config import UNMATCHED_HOLE_CHOICES, runtime_config
from isorings.core.smoothing import smooth_linear

logger = logging.getLogger(__name__)


class ContourBuilder:
    """矩形グリッドの等値ポリゴン生成器。

    Parameters
    ----------
    dx, dy : int
        グリッドの列数 / 行数（どちらも 1 以上）。
    smooth : bool or None
        True のとき、リング頂点を線形補間で平滑化する。
        None の場合は `config.yaml`（`contour.smooth`）の設定値を使う。
    open_fragments : str or None
        走査終了時に閉じなかった断片の扱い（`"drop"` / `"close"` / `"error"`）。
        None の場合は `contour.open_fragments` の設定値を使う。
    unmatched_holes : str or None
        どの外周にも含まれない穴の扱い（`"drop"` / `"error"`）。
        None の場合は `contour.unmatched_holes` の設定値を使う。
    """

    def __init__(
        self,
        dx: int,
        dy: int,
        smooth: bool | None = None,
        *,
        open_fragments: str | None = None,
        unmatched_holes: str | None = None,
    ) -> None:
        dx_i = int(dx)
        dy_i = int(dy)
        if dx_i < 1 or dy_i < 1:
            raise ValueError(f"dx, dy は 1 以上である必要があります: dx={dx}, dy={dy}")

        if smooth is None or open_fragments is None or unmatched_holes is None:
            cfg = runtime_config().contour
            if smooth is None:
                smooth = cfg.smooth
            if open_fragments is None:
                open_fragments = cfg.open_fragments
            if unmatched_holes is None:
                unmatched_holes = cfg.unmatched_holes

        if str(unmatched_holes) not in UNMATCHED_HOLE_CHOICES:
            raise ValueError(
                f"unmatched_holes は {UNMATCHED_HOLE_CHOICES} のいずれかである必要があります"
                f": got={unmatched_holes!r}"
            )

        self.dx = dx_i
        self.dy = dy_i
        self.smooth = bool(smooth)
        self.open_fragments = check_open_fragment_policy(str(open_fragments))
        self.unmatched_holes = str(unmatched_holes)

    def contours(
        self,
        values: Sequence[float] | np.ndarray,
        thresholds: Sequence[float] | np.ndarray,
    ) -> list[Contour]:
        """`thresholds` の各値について `Contour` を計算し、入力順に返す。

        Parameters
        ----------
        values : Sequence[float] or np.ndarray
            行優先の `dx * dy` 個のサンプル（shape `(dy, dx)` の配列も可）。
        thresholds : Sequence[float] or np.ndarray
            閾値列。重複はそれぞれ独立に計算する。

        Returns
        -------
        list[Contour]
            閾値と同じ順序・同じ個数の結果。

        Raises
        ------
        GridDimensionError
            サンプル数が `dx * dy` と一致しない場合（走査前に送出する）。
        """

        flat = as_flat_values(values, self.dx, self.dy)
        isoring = IsoRingBuilder(self.dx, self.dy, open_fragments=self.open_fragments)
        return [
            self._contour(flat, float(threshold), isoring)
            for threshold in np.asarray(thresholds, dtype=np.float64).reshape(-1).tolist()
        ]

    def contour(self, values: Sequence[float] | np.ndarray, threshold: float) -> Contour:
        """単一の閾値について `Contour` を返す。"""

        flat = as_flat_values(values, self.dx, self.dy)
        isoring = IsoRingBuilder(self.dx, self.dy, open_fragments=self.open_fragments)
        return self._contour(flat, float(threshold), isoring)

    def _contour(self, values: np.ndarray, threshold: float, isoring: IsoRingBuilder) -> Contour:
        rings = isoring.compute(values, threshold)

        groups: list[list[Ring]] = []
        holes: list[Ring] = []
        for ring in rings:
            if ring_area(ring) > 0.0:
                groups.append([ring])
            else:
                holes.append(ring)

        n_dropped = 0
        for hole in holes:
            for group in groups:
                if ring_contains(group[0], hole) != -1:
                    group.append(hole)
                    break
            else:
                if self.unmatched_holes == "error":
                    raise UnmatchedHoleError(
                        f"穴を含む外周が見つかりません: threshold={threshold}, first_point={hole[0].tolist()}"
                    )
                n_dropped += 1

        if n_dropped:
            logger.warning(
                "外周に含まれない穴を破棄しました: threshold=%s, count=%d",
                threshold,
                n_dropped,
            )

        if self.smooth:
            groups = [
                [smooth_linear(r, values, threshold, self.dx, self.dy) for r in group]
                for group in groups
            ]

        polygons = tuple(Polygon(exterior=g[0], holes=tuple(g[1:])) for g in groups)
        logger.debug(
            "threshold=%s: rings=%d polygons=%d holes=%d",
            threshold,
            len(rings),
            len(polygons),
            len(holes) - n_dropped,
        )
        return Contour(threshold=threshold, polygons=polygons)
