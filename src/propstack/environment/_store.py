"""階層化設定ストア。

PropertySource（名前付きプロパティ集合）と、それを優先度順に保持する
Environment を定義する。先頭のソースほど優先度が高い。
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Final, Protocol, runtime_checkable

from propstack.errors import PlaceholderResolutionError

_PLACEHOLDER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\$\{(?P<key>[^}:]+)(?::(?P<default>[^}]*))?\}"
)
"""``${key}`` および ``${key:default}`` 形式のプレースホルダー。"""


@dataclass
class PropertySource:
    """名前付きのプロパティ集合。

    インラインプロパティ用ソースは同一ストア上で繰り返し更新されるため
    properties は可変。

    Attributes:
        name: ストア内で一意なソース名。
        properties: キーから値へのマッピング。
    """

    name: str
    properties: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.properties.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.properties


@runtime_checkable
class ConfigurationStore(Protocol):
    """インテグレーターが操作する階層化設定ストアのプロトコル。"""

    def add_highest_precedence(self, source: PropertySource) -> None:
        """ソースを最高優先度で追加する。同名ソースがあれば置き換える。"""
        ...

    def get(self, name: str) -> PropertySource | None:
        """名前でソースを取得する。存在しなければ None。"""
        ...

    def get_raw_property(self, key: str) -> str | None:
        """最も優先度の高いソースの値をプレースホルダー未解決のまま返す。"""
        ...

    def resolve_placeholders(self, text: str) -> str:
        """text 内の ``${...}`` をストアの現在値で置換する。"""
        ...


class Environment:
    """PropertySource を優先度順に保持する既定のストア実装。

    Args:
        sources: 初期ソース。先頭ほど優先度が高い。
        ignore_unresolvable_placeholders: True の場合、解決できない
            プレースホルダーを例外にせずそのまま残す。

    Raises:
        ValueError: 初期ソースに同名のものが含まれる場合。
    """

    def __init__(
        self,
        sources: Iterable[PropertySource] = (),
        *,
        ignore_unresolvable_placeholders: bool = False,
    ) -> None:
        self._sources: list[PropertySource] = []
        self._ignore_unresolvable = ignore_unresolvable_placeholders
        for source in sources:
            if self.get(source.name) is not None:
                raise ValueError(f"Duplicate property source name: '{source.name}'")
            self._sources.append(source)

    # --- ソース操作 ---

    def add_highest_precedence(self, source: PropertySource) -> None:
        self.remove(source.name)
        self._sources.insert(0, source)

    def add_lowest_precedence(self, source: PropertySource) -> None:
        """ソースを最低優先度で追加する。同名ソースがあれば置き換える。"""
        self.remove(source.name)
        self._sources.append(source)

    def get(self, name: str) -> PropertySource | None:
        return next((s for s in self._sources if s.name == name), None)

    def remove(self, name: str) -> PropertySource | None:
        """名前でソースを取り除き、取り除いたソースを返す。"""
        source = self.get(name)
        if source is not None:
            self._sources.remove(source)
        return source

    def names(self) -> tuple[str, ...]:
        """ソース名を優先度の高い順に返す。"""
        return tuple(s.name for s in self._sources)

    def __iter__(self) -> Iterator[PropertySource]:
        return iter(tuple(self._sources))

    def __len__(self) -> int:
        return len(self._sources)

    # --- プロパティ参照 ---

    def get_raw_property(self, key: str) -> str | None:
        """最も優先度の高いソースの値をプレースホルダー未解決のまま返す。"""
        for source in self._sources:
            if key in source:
                return source.properties[key]
        return None

    def get_property(self, key: str, default: str | None = None) -> str | None:
        """key の実効値を返す。値に含まれるプレースホルダーは解決される。

        Raises:
            PlaceholderResolutionError: 値のプレースホルダーを解決できない場合。
        """
        value = self.get_raw_property(key)
        if value is None:
            return default
        return self._resolve(value, frozenset({key}))

    def as_dict(self) -> dict[str, str]:
        """全ソースを優先度に従って重ね合わせた実効プロパティを返す。

        値のプレースホルダーは解決しない。キー順は低優先度ソースの出現順。
        """
        merged: dict[str, str] = {}
        for source in reversed(self._sources):
            merged.update(source.properties)
        return merged

    # --- プレースホルダー ---

    def resolve_placeholders(self, text: str) -> str:
        """``${key}`` / ``${key:default}`` をストアの値で置換する。

        置換後の値にプレースホルダーが含まれていれば再帰的に解決する。

        Raises:
            PlaceholderResolutionError: 解決できないキー、または循環参照がある場合。
        """
        return self._resolve(text, frozenset())

    def _resolve(self, text: str, visiting: frozenset[str]) -> str:
        return substitute_placeholders(
            text,
            self.get_raw_property,
            ignore_unresolvable=self._ignore_unresolvable,
            visiting=visiting,
        )


def substitute_placeholders(
    text: str,
    lookup: Callable[[str], str | None],
    *,
    ignore_unresolvable: bool = False,
    visiting: frozenset[str] = frozenset(),
) -> str:
    """``${key}`` / ``${key:default}`` を lookup の値で置換する。

    置換後の値にプレースホルダーが含まれていれば再帰的に解決する。

    Args:
        text: 置換対象の文字列。
        lookup: キーから未解決の値を返す関数。存在しなければ None。
        ignore_unresolvable: True の場合、解決できないプレースホルダーを残す。
        visiting: 解決中のキー。循環参照の検出に使う。

    Raises:
        PlaceholderResolutionError: 解決できないキー、または循環参照がある場合。
    """

    def replace(match: re.Match[str]) -> str:
        key = match.group("key")
        if key in visiting:
            raise PlaceholderResolutionError(text, key, "circular reference")
        value = lookup(key)
        if value is None:
            value = match.group("default")
        if value is None:
            if ignore_unresolvable:
                return match.group(0)
            raise PlaceholderResolutionError(text, key)
        return substitute_placeholders(
            value,
            lookup,
            ignore_unresolvable=ignore_unresolvable,
            visiting=visiting | {key},
        )

    return _PLACEHOLDER_PATTERN.sub(replace, text)
