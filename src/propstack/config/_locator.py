"""設定ファイル探索。

pyproject.toml のカレント→親探索と、ユーザーグローバル設定パスを提供する。
"""

from __future__ import annotations

from pathlib import Path

_CONFIG_FILE_NAME: str = "config.toml"
_PYPROJECT_FILE_NAME: str = "pyproject.toml"


def find_pyproject_toml(start: Path) -> Path | None:
    """start ディレクトリから親方向に pyproject.toml を探索する。

    ディレクトリなど通常ファイル以外の同名エントリは無視して探索を続ける。

    Args:
        start: 探索開始ディレクトリ。

    Returns:
        最初に見つかった pyproject.toml のフルパス。見つからなければ None。

    Raises:
        OSError: 探索パス上のアクセス権限エラー等。
    """
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / _PYPROJECT_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def get_user_config_path() -> Path:
    """ユーザーグローバル設定ファイルのパスを返す。

    ~/.config/propstack/config.toml を固定パスとして返す（存在チェックは行わない）。

    Raises:
        RuntimeError: ホームディレクトリを特定できない場合。
    """
    return Path.home() / ".config" / "propstack" / _CONFIG_FILE_NAME
