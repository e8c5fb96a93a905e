"""Environment インテグレーター。

マージ済みのロケーションとインラインプロパティを階層化設定ストアに適用する。
ロケーションを先に、インラインプロパティを最後に適用するため、
インラインプロパティが常に最も高い優先度になる。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Final

from propstack.environment._loader import ResourceLoader, load_property_source
from propstack.environment._properties import parse_inlined_properties
from propstack.environment._store import (
    ConfigurationStore,
    PropertySource,
    substitute_placeholders,
)
from propstack.models.config import DEFAULT_ENCODING
from propstack.models.declaration import MergedPropertySources

logger = logging.getLogger(__name__)

INLINED_PROPERTIES_SOURCE_NAME: Final[str] = "Inlined Test Properties"
"""インラインプロパティを集約する PropertySource の固定名。"""


def apply_locations_to_store(
    store: ConfigurationStore,
    loader: ResourceLoader,
    locations: Sequence[str],
    *,
    encoding: str = DEFAULT_ENCODING,
) -> None:
    """各ロケーションのリソースを PropertySource としてストアに追加する。

    ロケーション内のプレースホルダーは、この呼び出しで先に読み込んだソースを
    ストアの上に重ねた値で解決する。前のロケーションで定義されたキーを後の
    ロケーションで参照できる。全リソースの読み込みに成功してから
    locations の順に最高優先度で追加する。
    したがって末尾のロケーションが最も高い優先度になる。
    1つでも読み込みに失敗した場合、ストアは変更されない。

    Args:
        store: 更新対象のストア。
        loader: リソースローダー。
        locations: マージ済みロケーション（祖先側が先頭）。
        encoding: properties 形式リソースの文字コード。

    Raises:
        PlaceholderResolutionError: ロケーションのプレースホルダーを解決できない場合。
        ResourceLoadError: リソースの読み込みに失敗した場合。
    """
    sources: list[PropertySource] = []

    def staged_lookup(key: str) -> str | None:
        for source in reversed(sources):
            if key in source:
                return source.properties[key]
        return store.get_raw_property(key)

    for location in locations:
        staged = substitute_placeholders(
            location, staged_lookup, ignore_unresolvable=True
        )
        resolved = store.resolve_placeholders(staged)
        sources.append(load_property_source(loader, resolved, encoding=encoding))

    for source in sources:
        logger.debug("Adding property source [%s] with highest precedence", source.name)
        store.add_highest_precedence(source)


def apply_inlined_properties_to_store(
    store: ConfigurationStore,
    inlined_properties: Sequence[str],
) -> None:
    """インラインプロパティを単一の PropertySource としてストアに追加する。

    INLINED_PROPERTIES_SOURCE_NAME のソースが未登録なら最高優先度で作成し、
    登録済みなら優先度を変えずに既存ソースへマージする（既存キーは上書き）。
    空のシーケンスではストアを変更しない。

    Args:
        store: 更新対象のストア。
        inlined_properties: ``key=value`` 形式の文字列。

    Raises:
        MalformedEntryError: エントリが1つのプロパティとして解析できない場合。
    """
    if not inlined_properties:
        return
    parsed = parse_inlined_properties(inlined_properties)
    logger.debug("Adding inlined properties to store: %s", list(inlined_properties))

    source = store.get(INLINED_PROPERTIES_SOURCE_NAME)
    if source is None:
        source = PropertySource(name=INLINED_PROPERTIES_SOURCE_NAME)
        store.add_highest_precedence(source)
    source.properties.update(parsed)


def apply_merged_property_sources(
    store: ConfigurationStore,
    loader: ResourceLoader,
    merged: MergedPropertySources,
    *,
    encoding: str = DEFAULT_ENCODING,
) -> None:
    """マージ結果をストアに適用する。ロケーション、インラインプロパティの順。

    ロケーションの読み込みに失敗した場合、インラインプロパティは適用されない。
    """
    apply_locations_to_store(store, loader, merged.locations, encoding=encoding)
    apply_inlined_properties_to_store(store, merged.properties)
