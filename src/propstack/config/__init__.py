"""ツール設定モジュール。"""

from propstack.config._locator import find_pyproject_toml
from propstack.config._resolver import resolve_config

__all__ = [
    "find_pyproject_toml",
    "resolve_config",
]
