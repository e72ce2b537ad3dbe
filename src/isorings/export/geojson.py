"""
どこで: `src/isorings/export/geojson.py`。
何を: `Contour` 列を GeoJSON（Feature / FeatureCollection）へ変換・保存する関数を提供する。
なぜ: 等値ポリゴンを GIS ツールやブラウザの描画ライブラリへそのまま渡せるようにするため。
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from isorings.core.polygons import Contour
from isorings.core.runtime_config import runtime_config


@dataclass(frozen=True, slots=True)
class GeoJSONParams:
    """GeoJSON 生成パラメータ。

    Parameters
    ----------
    value_property : str
        閾値を格納する properties のキー。
    decimals : int or None
        座標を丸める小数桁数。None なら丸めない。
    indent : int or None
        `json.dumps()` の indent。None なら 1 行で出力する。
    """

    value_property: str = "value"
    decimals: int | None = None
    indent: int | None = None


def _params_from_config() -> GeoJSONParams:
    cfg = runtime_config().geojson
    return GeoJSONParams(
        value_property=str(cfg.value_property),
        decimals=cfg.decimals,
        indent=cfg.indent,
    )


def _round_coordinates(coords: Any, decimals: int) -> Any:
    if isinstance(coords, list):
        return [_round_coordinates(c, decimals) for c in coords]
    return round(float(coords), int(decimals))


def contour_to_feature(contour: Contour, *, params: GeoJSONParams | None = None) -> dict[str, Any]:
    """`Contour` を MultiPolygon ジオメトリの GeoJSON Feature（dict）にして返す。

    Notes
    -----
    座標はグリッド単位のまま出力する（地理座標への変換はしない）。
    ポリゴンが無い閾値でも、空の MultiPolygon を持つ Feature を返す。
    """

    p = params if params is not None else _params_from_config()
    coordinates = contour.to_coordinates()
    if p.decimals is not None:
        coordinates = _round_coordinates(coordinates, int(p.decimals))
    return {
        "type": "Feature",
        "properties": {p.value_property: float(contour.threshold)},
        "geometry": {"type": "MultiPolygon", "coordinates": coordinates},
    }


def contours_to_feature_collection(
    contours: Sequence[Contour],
    *,
    params: GeoJSONParams | None = None,
) -> dict[str, Any]:
    """`Contour` 列を閾値順の FeatureCollection（dict）にして返す。"""

    p = params if params is not None else _params_from_config()
    return {
        "type": "FeatureCollection",
        "features": [contour_to_feature(c, params=p) for c in contours],
    }


def dumps_geojson(contours: Sequence[Contour], *, params: GeoJSONParams | None = None) -> str:
    """FeatureCollection を JSON 文字列にして返す。

    Raises
    ------
    ValueError
        座標に NaN / inf が含まれる場合（GeoJSON は非有限値を表現できない）。
    """

    p = params if params is not None else _params_from_config()
    payload = contours_to_feature_collection(contours, params=p)
    return json.dumps(payload, indent=p.indent, allow_nan=False)


def export_geojson(
    contours: Sequence[Contour],
    path: str | Path,
    *,
    params: GeoJSONParams | None = None,
) -> Path:
    """`Contour` 列を GeoJSON FeatureCollection として保存する。

    Parameters
    ----------
    contours : Sequence[Contour]
        `ContourBuilder.contours()` の結果。
    path : str or Path
        出力先パス。親ディレクトリが無ければ作る。
    params : GeoJSONParams or None
        出力パラメータ。None の場合は `config.yaml`（`export.geojson`）の設定値を使う。

    Returns
    -------
    Path
        保存先パス。
    """

    _path = Path(path)
    text = dumps_geojson(contours, params=params)
    _path.parent.mkdir(parents=True, exist_ok=True)
    _path.write_text(text + "\n", encoding="utf-8")
    return _path
