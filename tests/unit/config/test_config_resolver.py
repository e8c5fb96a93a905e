"""設定リゾルバーのテスト。"""

from __future__ import annotations

import contextlib
import tomllib
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from propstack.config._resolver import (
    filter_overrides,
    merge_config_layers,
    resolve_config,
)
from propstack.models.config import PropstackConfig


# ---------------------------------------------------------------------------
# merge_config_layers / filter_overrides
# ---------------------------------------------------------------------------


class TestMergeConfigLayers:
    def test_returns_empty_dict(self) -> None:
        assert merge_config_layers() == {}

    def test_none_layers_skipped(self) -> None:
        assert merge_config_layers(None, {"encoding": "ascii"}, None) == {
            "encoding": "ascii"
        }

    def test_later_layer_overrides(self) -> None:
        low: dict[str, object] = {"encoding": "ascii", "default_suffix": ".toml"}
        high: dict[str, object] = {"encoding": "latin-1"}
        assert merge_config_layers(low, high) == {
            "encoding": "latin-1",
            "default_suffix": ".toml",
        }

    def test_inputs_not_mutated(self) -> None:
        low: dict[str, object] = {"encoding": "ascii"}
        merge_config_layers(low, {"encoding": "latin-1"})
        assert low == {"encoding": "ascii"}


class TestFilterOverrides:
    def test_none_values_removed(self) -> None:
        assert filter_overrides({"encoding": None, "default_suffix": ".toml"}) == {
            "default_suffix": ".toml"
        }

    def test_false_kept(self) -> None:
        """False は未指定ではない。"""
        assert filter_overrides({"ignore_unresolvable_placeholders": False}) == {
            "ignore_unresolvable_placeholders": False
        }


# ---------------------------------------------------------------------------
# resolve_config
# ---------------------------------------------------------------------------


def _write_toml(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _user_config_at(path: Path) -> contextlib.AbstractContextManager[object]:
    """get_user_config_path を指定パスに差し替える patch を返す。"""
    return patch("propstack.config._resolver.get_user_config_path", return_value=path)


def _nonexistent_user_config(
    tmp_path: Path,
) -> contextlib.AbstractContextManager[object]:
    return _user_config_at(tmp_path / "nonexistent" / "config.toml")


class TestResolveConfigNoFiles:
    def test_returns_default_config(self, tmp_path: Path) -> None:
        with _nonexistent_user_config(tmp_path):
            config = resolve_config(start_dir=tmp_path)
        assert config == PropstackConfig()

    def test_pyproject_without_section(self, tmp_path: Path) -> None:
        _write_toml(tmp_path / "pyproject.toml", '[project]\nname = "x"\n')
        with _nonexistent_user_config(tmp_path):
            assert resolve_config(start_dir=tmp_path) == PropstackConfig()


class TestResolveConfigLayers:
    """ユーザー設定 < pyproject.toml < 上書き の優先順位を検証。"""

    def test_user_config_applied(self, tmp_path: Path) -> None:
        user = _write_toml(tmp_path / "home" / "config.toml", 'encoding = "ascii"\n')
        with _user_config_at(user):
            config = resolve_config(start_dir=tmp_path / "home")
        assert config.encoding == "ascii"

    def test_pyproject_overrides_user_config(self, tmp_path: Path) -> None:
        user = _write_toml(
            tmp_path / "home" / "config.toml",
            'encoding = "ascii"\ndefault_suffix = ".toml"\n',
        )
        project = tmp_path / "project"
        _write_toml(
            project / "pyproject.toml", '[tool.propstack]\nencoding = "latin-1"\n'
        )
        with _user_config_at(user):
            config = resolve_config(start_dir=project)
        assert config.encoding == "latin-1"
        assert config.default_suffix == ".toml"

    def test_overrides_win(self, tmp_path: Path) -> None:
        _write_toml(
            tmp_path / "pyproject.toml", '[tool.propstack]\nencoding = "latin-1"\n'
        )
        with _nonexistent_user_config(tmp_path):
            config = resolve_config(
                start_dir=tmp_path,
                overrides={"encoding": "ascii", "default_suffix": None},
            )
        assert config.encoding == "ascii"
        assert config.default_suffix == ".properties"

    def test_pyproject_found_from_subdirectory(self, tmp_path: Path) -> None:
        _write_toml(
            tmp_path / "pyproject.toml",
            "[tool.propstack]\nignore_unresolvable_placeholders = true\n",
        )
        nested = tmp_path / "tests" / "unit"
        nested.mkdir(parents=True)
        with _nonexistent_user_config(tmp_path):
            config = resolve_config(start_dir=nested)
        assert config.ignore_unresolvable_placeholders is True

    def test_cwd_used_when_start_dir_omitted(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_toml(
            tmp_path / "pyproject.toml", '[tool.propstack]\ndefault_suffix = ".toml"\n'
        )
        monkeypatch.chdir(tmp_path)
        with _nonexistent_user_config(tmp_path):
            assert resolve_config().default_suffix == ".toml"


class TestResolveConfigSearchPaths:
    """相対 search_paths は設定ファイルのディレクトリ基準になる。"""

    def test_pyproject_relative_paths_anchored(self, tmp_path: Path) -> None:
        _write_toml(
            tmp_path / "pyproject.toml",
            '[tool.propstack]\nsearch_paths = ["resources", "/abs/path"]\n',
        )
        with _nonexistent_user_config(tmp_path):
            config = resolve_config(start_dir=tmp_path)
        assert config.search_paths == (
            str(tmp_path.resolve() / "resources"),
            "/abs/path",
        )

    def test_user_config_relative_paths_anchored(self, tmp_path: Path) -> None:
        user = _write_toml(
            tmp_path / "home" / "config.toml", 'search_paths = ["shared"]\n'
        )
        with _user_config_at(user):
            config = resolve_config(start_dir=tmp_path / "home")
        assert config.search_paths == (str(tmp_path / "home" / "shared"),)

    def test_non_list_rejected(self, tmp_path: Path) -> None:
        _write_toml(
            tmp_path / "pyproject.toml", '[tool.propstack]\nsearch_paths = "res"\n'
        )
        with _nonexistent_user_config(tmp_path):
            with pytest.raises(TypeError, match="must be a list"):
                resolve_config(start_dir=tmp_path)


class TestResolveConfigErrors:
    def test_invalid_value_raises_validation_error(self, tmp_path: Path) -> None:
        _write_toml(
            tmp_path / "pyproject.toml", '[tool.propstack]\ndefault_suffix = "txt"\n'
        )
        with _nonexistent_user_config(tmp_path):
            with pytest.raises(ValidationError, match="default_suffix"):
                resolve_config(start_dir=tmp_path)

    def test_unknown_key_raises_validation_error(self, tmp_path: Path) -> None:
        _write_toml(tmp_path / "pyproject.toml", "[tool.propstack]\nunknown = 1\n")
        with _nonexistent_user_config(tmp_path):
            with pytest.raises(ValidationError, match="extra_forbidden"):
                resolve_config(start_dir=tmp_path)

    def test_invalid_toml_propagates(self, tmp_path: Path) -> None:
        _write_toml(tmp_path / "pyproject.toml", "[tool.propstack\n")
        with _nonexistent_user_config(tmp_path):
            with pytest.raises(tomllib.TOMLDecodeError):
                resolve_config(start_dir=tmp_path)
