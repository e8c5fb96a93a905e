"""クロスレベルリデューサー。

最も派生したレベルから祖先方向へ走査し、各レベルの値を先頭へ挿入する。
inherit フラグが False のレベルで走査を打ち切る。locations と properties は
それぞれ独立したパスで処理する。
"""

from __future__ import annotations

from collections.abc import Sequence

from propstack.environment._loader import DefaultResourceLoader, ResourceLoader
from propstack.merge._grouper import group_by_level
from propstack.merge._level import merge_level
from propstack.merge._locations import convert_to_resource_paths
from propstack.models.config import PropstackConfig
from propstack.models.declaration import (
    MergedPropertySources,
    PropertySourceAttributes,
)
from propstack.resolution._resolver import DeclarationResolver, resolve_declarations


def merge_locations(
    attributes_list: Sequence[PropertySourceAttributes],
) -> tuple[str, ...]:
    """全レベルの locations をマージする。

    Args:
        attributes_list: 最も派生したレベルが先頭の正規化済み属性。

    Returns:
        祖先側のレベルが先頭、最も派生したレベルが末尾のロケーション。
        各ロケーションは正規形に変換済み。
    """
    locations: list[str] = []
    for attributes in attributes_list:
        converted = convert_to_resource_paths(
            attributes.declaring_unit, attributes.locations
        )
        locations[0:0] = converted
        if not attributes.inherit_locations:
            break
    return tuple(locations)


def merge_properties(
    attributes_list: Sequence[PropertySourceAttributes],
) -> tuple[str, ...]:
    """全レベルのインラインプロパティをマージする。

    Args:
        attributes_list: 最も派生したレベルが先頭の正規化済み属性。

    Returns:
        祖先側のレベルが先頭、最も派生したレベルが末尾のインラインプロパティ。
    """
    properties: list[str] = []
    for attributes in attributes_list:
        properties[0:0] = attributes.properties
        if not attributes.inherit_properties:
            break
    return tuple(properties)


def merge_configuration(
    unit: type[object],
    *,
    resolver: DeclarationResolver = resolve_declarations,
    loader: ResourceLoader | None = None,
    config: PropstackConfig | None = None,
) -> MergedPropertySources:
    """unit に適用されるプロパティソース宣言をマージする。

    Args:
        unit: 対象のクラス。
        resolver: 宣言リゾルバー。
        loader: 既定リソース検出に使うローダー。None の場合は config の
            search_paths で DefaultResourceLoader を構築する。
        config: ツール設定。None の場合はデフォルト値。

    Returns:
        マージ結果。宣言がなければ空の結果。

    Raises:
        ConsistencyError: 同一レベルの宣言が矛盾している場合。
        DefaultResourceNotFoundError: 既定リソースが必要だが存在しない場合。
    """
    effective_config = config if config is not None else PropstackConfig()
    declarations = resolver(unit)
    if not declarations:
        return MergedPropertySources.empty()

    effective_loader = (
        loader
        if loader is not None
        else DefaultResourceLoader(effective_config.search_paths)
    )
    attributes_list = [
        merge_level(
            level, effective_loader, default_suffix=effective_config.default_suffix
        )
        for level in group_by_level(declarations)
    ]
    return MergedPropertySources(
        locations=merge_locations(attributes_list),
        properties=merge_properties(attributes_list),
    )
