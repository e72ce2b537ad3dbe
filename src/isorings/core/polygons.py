# どこで: `src/isorings/core/polygons.py`。
# 何を: 等値線計算の結果モデル（Polygon / Contour）と、その検証ロジック。

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

Ring = np.ndarray
"""shape `(N, 2)` の float64 座標配列で表す閉リング。

Notes
-----
座標はグリッド単位（サンプル (x, y) の中心が `(x + 0.5, y + 0.5)`）。
縫合で作られたリングは先頭点と末尾点が一致する。
"""


def as_ring(value: object, *, context: str) -> Ring:
    """任意の点列を読み取り専用の `(N, 2)` float64 配列にして返す。

    Parameters
    ----------
    value : object
        点列（配列 / list of [x, y] など）。
    context : str
        例外メッセージに含める文脈情報。

    Raises
    ------
    ValueError
        shape が `(N, 2)` でない場合。
    """

    arr = np.asarray(value, dtype=np.float64)
    if arr.ndim != 2 or int(arr.shape[1]) != 2:
        raise ValueError(f"{context}: リングは shape (N,2) の配列である必要があります: shape={arr.shape}")
    if arr.flags.writeable:
        arr = arr.copy()
        # 不変性確保のため writeable=False に設定する。
        arr.setflags(write=False)
    return arr


@dataclass(frozen=True, slots=True)
class Polygon:
    """外周 1 本と、それに含まれる穴 0 本以上からなるポリゴン。

    Parameters
    ----------
    exterior : Ring
        外周リング。
    holes : tuple[Ring, ...]
        穴リング列（外周の内側にある）。
    """

    exterior: Ring
    holes: tuple[Ring, ...] = ()

    def __post_init__(self) -> None:
        """配列形状を検証し、読み取り専用に固定する。"""
        exterior = as_ring(self.exterior, context="Polygon.exterior")
        holes = tuple(as_ring(h, context="Polygon.holes") for h in self.holes)
        object.__setattr__(self, "exterior", exterior)
        object.__setattr__(self, "holes", holes)

    @property
    def rings(self) -> tuple[Ring, ...]:
        """外周 → 穴の順に並べたリング列。"""
        return (self.exterior, *self.holes)

    def to_coordinates(self) -> list[list[list[float]]]:
        """GeoJSON Polygon と同じ入れ子の list で返す。"""
        return [ring.tolist() for ring in self.rings]


@dataclass(frozen=True, slots=True)
class Contour:
    """1 つの閾値に対する等値ポリゴン集合。

    Parameters
    ----------
    threshold : float
        閾値（この値以上の領域がポリゴン内部）。
    polygons : tuple[Polygon, ...]
        走査中にリングが閉じた順のポリゴン列。
    """

    threshold: float
    polygons: tuple[Polygon, ...] = ()

    def __post_init__(self) -> None:
        polygons = tuple(self.polygons)
        for p in polygons:
            if not isinstance(p, Polygon):
                raise TypeError(f"Contour.polygons の要素は Polygon である必要があります: {type(p)!r}")
        object.__setattr__(self, "threshold", float(self.threshold))
        object.__setattr__(self, "polygons", polygons)

    @property
    def is_empty(self) -> bool:
        return not self.polygons

    def to_coordinates(self) -> list[list[list[list[float]]]]:
        """GeoJSON MultiPolygon と同じ入れ子の list で返す。"""
        return [p.to_coordinates() for p in self.polygons]
