# どこで: `src/isorings/__main__.py`。
# 何を: `python -m isorings ...` の CLI エントリポイントを提供する。
# なぜ: サンプルファイルから GeoJSON を作る作業を、スクリプトを書かずに実行できるようにするため。

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np


def _load_values(path: Path) -> np.ndarray:
    """`.npy` またはテキスト（空白/カンマ区切り）のサンプルを 1 次元配列で返す。"""

    if path.suffix.lower() == ".npy":
        return np.load(path, allow_pickle=False).astype(np.float64, copy=False).reshape(-1)
    text = path.read_text(encoding="utf-8").replace(",", " ")
    return np.array(text.split(), dtype=np.float64)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="python -m isorings")
    sub = p.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("contours", help="サンプルグリッドから等値ポリゴンを GeoJSON で出力する")
    c.add_argument("input", type=Path, help="サンプルファイル（.npy / テキスト）")
    c.add_argument("--dx", type=int, required=True, help="グリッドの列数")
    c.add_argument("--dy", type=int, required=True, help="グリッドの行数")
    c.add_argument(
        "-t",
        "--threshold",
        type=float,
        action="append",
        required=True,
        help="閾値（複数指定可、指定順に出力）",
    )
    c.add_argument(
        "--smooth",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="線形補間による平滑化（省略時: config.yaml の contour.smooth）",
    )
    c.add_argument("--config", type=Path, default=None, help="config.yaml のパス")
    c.add_argument("-o", "--out", type=Path, default=None, help="出力先（省略時: 標準出力）")
    c.add_argument("-v", "--verbose", action="store_true", help="DEBUG ログを出す")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 設定パスは builder / export より先に確定させる（runtime_config はキャッシュされる）。
    from isorings.core.runtime_config import set_config_path

    if args.config is not None:
        set_config_path(args.config)

    if args.cmd == "contours":
        from isorings.core.contour_builder import ContourBuilder
        from isorings.export.geojson import dumps_geojson, export_geojson

        # 入力ファイル / グリッド寸法の誤りは引数エラーとして扱う（GridDimensionError も ValueError）。
        try:
            values = _load_values(args.input)
            builder = ContourBuilder(args.dx, args.dy, smooth=args.smooth)
            contours = builder.contours(values, args.threshold)
        except (ValueError, OSError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 2
        if args.out is None:
            sys.stdout.write(dumps_geojson(contours) + "\n")
        else:
            export_geojson(contours, args.out)
        return 0

    raise AssertionError(f"unknown cmd: {args.cmd!r}")


if __name__ == "__main__":
    raise SystemExit(main())
