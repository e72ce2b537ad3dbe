"""テスト共通: 実行時設定を同梱デフォルトだけに固定する。"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from isorings.core import runtime_config as runtime_config_module
from isorings.core.runtime_config import set_config_path


@pytest.fixture(autouse=True)
def _isolated_runtime_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    # CWD / HOME の config.yaml を拾わないようにする。
    monkeypatch.setattr(runtime_config_module, "_default_config_candidates", lambda: ())
    set_config_path(None)
    yield
    set_config_path(None)
