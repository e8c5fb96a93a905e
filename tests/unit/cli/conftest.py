"""CLI テスト共通フィクスチャ・ヘルパー。"""

from __future__ import annotations

import textwrap
import uuid
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

PATCH_USER_CONFIG_PATH = "propstack.config._resolver.get_user_config_path"

CASES_SOURCE = textwrap.dedent(
    """\
    from propstack.resolution import property_source


    @property_source(locations=["base.properties"], properties=["shared=base"])
    class BaseCase:
        pass


    @property_source(properties=["shared=child", "url=${host}:8080"])
    class ChildCase(BaseCase):
        pass


    @property_source()
    class DefaultCase:
        pass


    @property_source()
    class MissingDefaultCase:
        pass


    @property_source(properties=["url=${undefined.host}"])
    class UnresolvableCase:
        pass


    class PlainCase:
        class Nested:
            pass


    not_a_class = 1
    """
)


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """ユーザー設定とカレントディレクトリの pyproject.toml を読まないようにする。"""
    monkeypatch.chdir(tmp_path)
    with patch(
        PATCH_USER_CONFIG_PATH, return_value=tmp_path / "nonexistent" / "config.toml"
    ):
        yield


@pytest.fixture
def sample_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """宣言付きクラスを持つ一時パッケージを作成し、パッケージ名を返す。

    テスト間で sys.modules が衝突しないよう、パッケージ名は毎回一意にする。
    """
    name = f"propstack_cli_fixture_{uuid.uuid4().hex}"
    root = tmp_path / "src"
    package = root / name
    package.mkdir(parents=True)
    (package / "__init__.py").write_text("", encoding="utf-8")
    (package / "cases.py").write_text(CASES_SOURCE, encoding="utf-8")
    (package / "base.properties").write_text(
        "host=localhost\nbase.only=1\n", encoding="utf-8"
    )
    (package / "DefaultCase.properties").write_text("d=1\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(root))
    return name
