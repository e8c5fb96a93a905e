"""ロケーションの正規化。

宣言されたロケーションを、宣言クラスのパッケージを基準とした
``classpath:`` 付きの正規形に変換する。
"""

from __future__ import annotations

import posixpath
import sys
from collections.abc import Iterable

from propstack.environment._loader import CLASSPATH_PREFIX, URL_PATTERN

_PLACEHOLDER_PREFIX = "${"


def package_resource_path(unit: type[object]) -> str:
    """unit を定義したモジュールを含むパッケージのリソースパスを返す。

    ``pkg.sub.module`` に定義されたクラスなら ``pkg/sub``。
    パッケージの ``__init__`` に定義されたクラスならそのパッケージ自身。
    トップレベルモジュールでは空文字列。
    """
    module_name = unit.__module__
    module = sys.modules.get(module_name)
    if module is not None and hasattr(module, "__path__"):
        package = module_name
    else:
        package = module_name.rpartition(".")[0]
    return package.replace(".", "/")


def _qualify(package_path: str, path: str) -> str:
    if not package_path:
        return f"{CLASSPATH_PREFIX}{path}"
    return f"{CLASSPATH_PREFIX}{package_path}/{path}"


def _clean(location: str) -> str:
    """``.`` / ``..`` セグメントと重複スラッシュを正規化する。"""
    if _PLACEHOLDER_PREFIX in location:
        return location
    match = URL_PATTERN.match(location)
    prefix = match.group(0) if match else ""
    path = location[len(prefix) :]
    if not path:
        return location
    cleaned = posixpath.normpath(path)
    if prefix == CLASSPATH_PREFIX:
        cleaned = cleaned.lstrip("/")
    return f"{prefix}{cleaned}"


def convert_to_resource_paths(
    unit: type[object], locations: Iterable[str]
) -> tuple[str, ...]:
    """宣言されたロケーションを正規形に変換する。

    - ``/`` 始まり: クラスパスルート基準（``classpath:`` を付与）
    - URL スキーム付き（``classpath:``, ``file:`` など）: そのまま
    - ``${`` 始まり: プレースホルダー展開後に完全なロケーションになるためそのまま
    - その他の相対パス: unit のパッケージ基準

    Args:
        unit: ロケーションを宣言したクラス。
        locations: 宣言されたロケーション。

    Returns:
        正規化されたロケーション。順序は入力と同じ。
    """
    package_path = package_resource_path(unit)
    converted: list[str] = []
    for location in locations:
        if location.startswith("/"):
            result = f"{CLASSPATH_PREFIX}{location.lstrip('/')}"
        elif URL_PATTERN.match(location) or location.startswith(_PLACEHOLDER_PREFIX):
            result = location
        else:
            result = _qualify(package_path, location)
        converted.append(_clean(result))
    return tuple(converted)


def default_resource_location(unit: type[object], suffix: str) -> str:
    """unit の既定リソースのロケーションを返す。

    ``pkg.module.SampleCase`` なら ``classpath:pkg/SampleCase.properties``。
    """
    return _qualify(package_resource_path(unit), f"{unit.__qualname__}{suffix}")
