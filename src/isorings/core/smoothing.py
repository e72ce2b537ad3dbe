"""
どこで: `src/isorings/core/smoothing.py`。
何を: Marching Squares の辺中点を、両端サンプルの線形補間位置へ寄せる。
なぜ: 生のリングは常に辺の中点を通るため、セル内の実際の交点位置に近づけるため。
"""

from __future__ import annotations

import numpy as np


def smooth_linear(
    ring: np.ndarray,
    values: np.ndarray,
    threshold: float,
    dx: int,
    dy: int,
) -> np.ndarray:
    """リング頂点を線形補間で移動した新しい配列を返す。

    Parameters
    ----------
    ring : np.ndarray
        shape `(N, 2)` のリング。
    values : np.ndarray
        行優先の `dx * dy` 個のサンプル。
    threshold : float
        リングを計算した閾値。
    dx, dy : int
        グリッドの列数 / 行数。

    Returns
    -------
    np.ndarray
        平滑化後のリング（入力は変更しない）。

    Notes
    -----
    - x が整数で `0 < x < dx` の点は、サンプル (x-1, ⌊y⌋) と (x, ⌊y⌋) の間で補間する。
    - y が整数で `0 < y < dy` の点は、サンプル (⌊x⌋, y-1) と (⌊x⌋, y) の間で補間する。
    - グリッド外周上の点、両サンプルが等しい点、どちらかが非有限の点はそのまま残す。
    """

    pts = np.array(ring, dtype=np.float64, copy=True)
    if pts.shape[0] == 0:
        return pts

    grid = np.asarray(values, dtype=np.float64).reshape(int(dy), int(dx))
    t = float(threshold)
    x = pts[:, 0].copy()
    y = pts[:, 1].copy()
    xt = np.trunc(x).astype(np.int64)
    yt = np.trunc(y).astype(np.int64)
    in_grid = (xt >= 0) & (xt < dx) & (yt >= 0) & (yt < dy)

    on_vertical = in_grid & (x > 0.0) & (x < float(dx)) & (x == xt)
    idx = np.nonzero(on_vertical)[0]
    if idx.size:
        v1 = grid[yt[idx], xt[idx]]
        v0 = grid[yt[idx], xt[idx] - 1]
        _shift(pts[:, 0], idx, x[idx], v0, v1, t)

    on_horizontal = in_grid & (y > 0.0) & (y < float(dy)) & (y == yt)
    idx = np.nonzero(on_horizontal)[0]
    if idx.size:
        v1 = grid[yt[idx], xt[idx]]
        v0 = grid[yt[idx] - 1, xt[idx]]
        _shift(pts[:, 1], idx, y[idx], v0, v1, t)

    return pts


def _shift(
    out: np.ndarray,
    idx: np.ndarray,
    coord: np.ndarray,
    v0: np.ndarray,
    v1: np.ndarray,
    threshold: float,
) -> None:
    denom = v1 - v0
    ok = np.isfinite(denom) & (denom != 0.0)
    if not np.any(ok):
        return
    out[idx[ok]] = coord[ok] + (threshold - v0[ok]) / denom[ok] - 0.5
