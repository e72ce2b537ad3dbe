# どこで: `src/isorings/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・ロード・キャッシュ）を提供する。
# なぜ: 平滑化の既定値や、開いた断片/孤立した穴の扱いをコードを触らずに切り替えるため。

"""実行時設定（`config.yaml`）の探索・ロード・キャッシュを担当する。

このモジュールは、以下を提供する:

- `config.yaml` を「同梱デフォルト → ユーザー設定（任意）」の順に適用して `RuntimeConfig` を構築
- 探索パス（CWD / HOME）と、明示指定（`set_config_path()`）の両方に対応
- 1 回ロードした結果をプロセス内でキャッシュ（設定を切り替える場合は `set_config_path()` で破棄）

実装メモ
--------
- ユーザー設定の適用は `dict.update()`（トップレベルの浅い上書き）で行う。
  ネストした mapping は「部分的にマージ」されず「丸ごと置換」される。
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

OPEN_FRAGMENT_CHOICES = ("drop", "close", "error")
UNMATCHED_HOLE_CHOICES = ("drop", "error")


@dataclass(frozen=True, slots=True)
class ContourConfig:
    """等値線計算の既定値（`config.yaml` の `contour`）。"""

    smooth: bool
    open_fragments: str
    unmatched_holes: str


@dataclass(frozen=True, slots=True)
class GeoJSONExportConfig:
    """GeoJSON 出力設定（`config.yaml` の `export.geojson`）。"""

    value_property: str
    decimals: int | None
    indent: int | None


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """isorings の実行時設定。

    Attributes
    ----------
    config_path:
        実際に採用されたユーザー設定ファイルのパス。
        ユーザー設定が無い場合は None（同梱デフォルトのみで動作）。
    contour:
        `ContourBuilder` の既定値。
    geojson:
        `export_geojson()` の既定値。
    """

    config_path: Path | None
    contour: ContourConfig
    geojson: GeoJSONExportConfig


# `set_config_path()` で指定される「明示 config」のパス。
_EXPLICIT_CONFIG_PATH: Path | None = None
# `runtime_config()` のプロセス内キャッシュ。設定を切り替える場合は破棄する。
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Parameters
    ----------
    path:
        `config.yaml` のパス。None の場合は明示指定を解除する。

    Notes
    -----
    設定が変わるため、`runtime_config()` のキャッシュを破棄する。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    if path is None:
        _EXPLICIT_CONFIG_PATH = None
        _CONFIG_CACHE = None
        return
    _EXPLICIT_CONFIG_PATH = Path(str(path)).expanduser()
    _CONFIG_CACHE = None


def _default_config_candidates() -> tuple[Path, ...]:
    """既定の `config.yaml` 探索候補を返す。

    探索順（先勝ち）:
    - `./.isorings/config.yaml`
    - `~/.config/isorings/config.yaml`
    """

    return (
        Path.cwd() / ".isorings" / "config.yaml",
        Path.home() / ".config" / "isorings" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    """任意値を mapping として解釈し、dict に正規化して返す。"""

    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _as_bool(value: Any, *, key: str) -> bool | None:
    """任意値を bool として解釈して返す。"""

    if value is None:
        return None
    if isinstance(value, bool):
        return bool(value)
    if isinstance(value, int) and int(value) in (0, 1):
        return bool(int(value))
    raise RuntimeError(f"{key} は bool である必要があります: got={value!r}")


def _as_int(value: Any, *, key: str) -> int | None:
    """任意値を int として解釈して返す。"""

    if value is None:
        return None
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}")
    try:
        return int(value)
    except Exception as exc:
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}") from exc


def _as_choice(value: Any, *, key: str, choices: tuple[str, ...]) -> str | None:
    """任意値を `choices` のいずれかの文字列として解釈して返す。"""

    if value is None:
        return None
    s = str(value).strip()
    if s not in choices:
        raise ValueError(f"{key} は {choices} のいずれかである必要があります: got={value!r}")
    return s


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    """YAML テキストを読み、トップレベル mapping を dict として返す。"""

    import yaml  # type: ignore[import-untyped]

    try:
        data = yaml.safe_load(text)
    except Exception as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")

    return dict(data)


def _load_yaml_config(path: Path) -> dict[str, Any]:
    """UTF-8 の YAML ファイルを読み、dict を返す。"""

    text = path.read_text(encoding="utf-8")
    return _load_yaml_text(text, source=str(path))


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱デフォルト config（`isorings/resource/default_config.yaml`）をロードする。"""

    try:
        blob = (
            resources.files("isorings")
            .joinpath("resource", "default_config.yaml")
            .read_text(encoding="utf-8")
        )
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "同梱 default_config.yaml の読み込みに失敗しました"
            "（パッケージ配布物の package-data を確認してください）"
        ) from exc

    return _load_yaml_text(blob, source="isorings/resource/default_config.yaml")


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。

    読み込み元の優先順位（後勝ち）:
    1) 同梱 `isorings/resource/default_config.yaml`
    2) 探索で見つかった `config.yaml`（任意）
    3) `set_config_path()` で明示指定された `config.yaml`（任意）
    """

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")

    discovered_path: Path | None = None
    for p in _default_config_candidates():
        if p.is_file():
            discovered_path = p
            break

    payload = _load_packaged_default_config()
    if discovered_path is not None:
        payload.update(_load_yaml_config(discovered_path))
    if explicit_path is not None:
        payload.update(_load_yaml_config(explicit_path))

    version = _as_int(payload.get("version"), key="version")
    if version is None:
        raise RuntimeError(
            "config.yaml の version が未設定です（同梱 default_config.yaml を確認してください）"
        )
    if version != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version}")

    contour = _as_mapping(payload.get("contour"), key="contour")
    smooth = _as_bool(contour.get("smooth"), key="contour.smooth")
    if smooth is None:
        raise RuntimeError(
            "contour.smooth が未設定です（同梱 default_config.yaml を確認してください）"
        )
    open_fragments = _as_choice(
        contour.get("open_fragments", "drop"),
        key="contour.open_fragments",
        choices=OPEN_FRAGMENT_CHOICES,
    )
    unmatched_holes = _as_choice(
        contour.get("unmatched_holes", "drop"),
        key="contour.unmatched_holes",
        choices=UNMATCHED_HOLE_CHOICES,
    )

    export = _as_mapping(payload.get("export"), key="export")
    geojson = _as_mapping(export.get("geojson"), key="export.geojson")
    value_property = str(geojson.get("value_property") or "value").strip()
    if not value_property:
        raise ValueError("export.geojson.value_property は空にできません")
    decimals = _as_int(geojson.get("decimals"), key="export.geojson.decimals")
    if decimals is not None and decimals < 0:
        raise ValueError(f"export.geojson.decimals は 0 以上である必要があります: got={decimals}")
    indent = _as_int(geojson.get("indent"), key="export.geojson.indent")

    cfg = RuntimeConfig(
        config_path=explicit_path or discovered_path,
        contour=ContourConfig(
            smooth=bool(smooth),
            open_fragments=str(open_fragments),
            unmatched_holes=str(unmatched_holes),
        ),
        geojson=GeoJSONExportConfig(
            value_property=value_property,
            decimals=decimals,
            indent=indent,
        ),
    )
    _CONFIG_CACHE = cfg
    return cfg


__all__ = [
    "ContourConfig",
    "GeoJSONExportConfig",
    "RuntimeConfig",
    "runtime_config",
    "set_config_path",
]
