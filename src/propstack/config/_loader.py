"""propstack 設定レイヤーの読み込み。

ユーザー設定ファイル（~/.config/propstack/config.toml）と pyproject.toml の
[tool.propstack] セクションを、マージ前の設定レイヤー（辞書）として返す。
どちらのレイヤーでも、相対 search_paths は宣言したファイルのディレクトリ
基準の絶対パスに置き換える。値の検証は PropstackConfig が行う。
"""

from __future__ import annotations

import tomllib
from pathlib import Path

_TOOL_SECTION_KEY: str = "tool"
_PROPSTACK_SECTION_KEY: str = "propstack"
_SEARCH_PATHS_KEY: str = "search_paths"


def load_user_config(path: Path) -> dict[str, object] | None:
    """ユーザー設定ファイルを設定レイヤーとして読み込む。

    ファイル全体が propstack の設定であり、セクションを持たない。

    Args:
        path: ユーザー設定ファイルのパス。

    Returns:
        設定レイヤー。ファイルが存在しなければ None。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
        PermissionError: 読み取り権限がない場合。
        TypeError: search_paths がリストでない場合。
    """
    try:
        data = _read_toml(path)
    except FileNotFoundError:
        return None
    return anchor_search_paths(data, path.parent)


def load_pyproject_config(path: Path) -> dict[str, object] | None:
    """pyproject.toml の [tool.propstack] を設定レイヤーとして読み込む。

    Args:
        path: pyproject.toml のパス。

    Returns:
        設定レイヤー。[tool.propstack] が無ければ None。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
        FileNotFoundError: ファイルが存在しない場合。
        PermissionError: 読み取り権限がない場合。
        TypeError: [tool.propstack] がテーブルでない場合、
            または search_paths がリストでない場合。
    """
    tool = _read_toml(path).get(_TOOL_SECTION_KEY)
    if not isinstance(tool, dict) or _PROPSTACK_SECTION_KEY not in tool:
        return None
    section = tool[_PROPSTACK_SECTION_KEY]
    if not isinstance(section, dict):
        msg = (
            f"[{_TOOL_SECTION_KEY}.{_PROPSTACK_SECTION_KEY}] must be a table, "
            f"got {type(section).__name__}"
        )
        raise TypeError(msg)
    return anchor_search_paths(section, path.parent)


def anchor_search_paths(layer: dict[str, object], base: Path) -> dict[str, object]:
    """レイヤー内の相対 search_paths を base 基準の絶対パスにする。

    絶対パスはそのまま残る。文字列以外の要素は検証のため変更しない。

    Raises:
        TypeError: search_paths がリストでない場合。
    """
    paths = layer.get(_SEARCH_PATHS_KEY)
    if paths is None:
        return layer
    if not isinstance(paths, list):
        msg = f"'{_SEARCH_PATHS_KEY}' must be a list, got {type(paths).__name__}"
        raise TypeError(msg)
    anchored = [str(base / p) if isinstance(p, str) else p for p in paths]
    return {**layer, _SEARCH_PATHS_KEY: anchored}


def _read_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as f:
        return tomllib.load(f)
