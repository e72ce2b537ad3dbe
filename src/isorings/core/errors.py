# どこで: `src/isorings/core/errors.py`。
# 何を: 等値リング計算で送出する例外型を定義する。
# なぜ: 呼び出し側が ValueError / RuntimeError のまま、または種類別に捕捉できるようにするため。

from __future__ import annotations


class GridDimensionError(ValueError):
    """サンプル数が `dx * dy` と一致しない。"""


class FragmentStoreError(RuntimeError):
    """断片ストアの内部整合性が壊れている（実装バグを示す）。"""


class OpenRingError(RuntimeError):
    """走査終了時に閉じていない断片が残った（`open_fragments="error"` 時）。"""


class UnmatchedHoleError(RuntimeError):
    """どの外周にも含まれない穴リングが見つかった（`unmatched_holes="error"` 時）。"""
