"""レベルマージャー。

同一レベル（aggregate_index）の宣言を1つの PropertySourceAttributes に
畳み込む。宣言間の整合性検証と既定リソースの検出を担当する。
"""

from __future__ import annotations

from propstack.environment._loader import ResourceLoader
from propstack.errors import ConsistencyError, DefaultResourceNotFoundError
from propstack.merge._locations import default_resource_location
from propstack.models.config import DEFAULT_RESOURCE_SUFFIX
from propstack.models.declaration import DeclarationLevel, PropertySourceAttributes


def detect_default_resource(
    unit: type[object],
    loader: ResourceLoader,
    suffix: str = DEFAULT_RESOURCE_SUFFIX,
) -> str | None:
    """unit の既定リソースを検出する。

    ``classpath:<パッケージパス>/<クラス名><suffix>`` が存在すればその
    ロケーションを返し、存在しなければ None を返す。失敗の扱いは呼び出し元が決める。
    """
    location = default_resource_location(unit, suffix)
    return location if loader.exists(location) else None


def _check_consistent(
    attribute: str,
    expected: object,
    current: object,
    unit: type[object],
    aggregate_index: int,
) -> None:
    if expected != current:
        raise ConsistencyError(attribute, unit, expected, current, aggregate_index)


def merge_level(
    level: DeclarationLevel,
    loader: ResourceLoader,
    *,
    default_suffix: str = DEFAULT_RESOURCE_SUFFIX,
) -> PropertySourceAttributes:
    """1レベル分の宣言を1つの PropertySourceAttributes に畳み込む。

    宣言はメタ距離の降順に安定ソートしてから処理する。後に処理した宣言ほど
    優先されるため、直接付与された宣言がメタ宣言より優先される。

    レベル内に locations / properties を明示した宣言が1つもなく、空の宣言が
    ある場合に限り既定リソースを検出して locations に加える。

    Args:
        level: 対象レベル。
        loader: 既定リソースの存在確認に使うローダー。
        default_suffix: 既定リソースの拡張子。

    Returns:
        正規化済みの属性。

    Raises:
        ConsistencyError: declaring_unit / inherit_locations / inherit_properties
            が宣言間で一致しない場合。
        DefaultResourceNotFoundError: 既定リソースが必要だが存在しない場合。
    """
    ordered = sorted(level.declarations, key=lambda d: d.distance, reverse=True)

    # 先頭の宣言を基準に、全宣言が同じ値を持つことを確認する
    first = ordered[0]
    declaring_unit = first.declaring_unit
    inherit_locations = first.inherit_locations
    inherit_properties = first.inherit_properties

    locations: list[str] = []
    properties: list[str] = []
    needs_default = False

    index = level.aggregate_index
    for declaration in ordered:
        unit = declaration.declaring_unit
        _check_consistent("declaring_unit", declaring_unit, unit, unit, index)
        _check_consistent(
            "inherit_locations",
            inherit_locations,
            declaration.inherit_locations,
            unit,
            index,
        )
        _check_consistent(
            "inherit_properties",
            inherit_properties,
            declaration.inherit_properties,
            unit,
            index,
        )

        if declaration.is_empty:
            needs_default = True
        else:
            locations.extend(declaration.locations)
            properties.extend(declaration.properties)

    if needs_default and not locations and not properties:
        default = detect_default_resource(declaring_unit, loader, default_suffix)
        if default is None:
            expected = default_resource_location(declaring_unit, default_suffix)
            raise DefaultResourceNotFoundError(declaring_unit, expected)
        locations.append(default)

    return PropertySourceAttributes(
        declaring_unit=declaring_unit,
        aggregate_index=level.aggregate_index,
        locations=tuple(locations),
        properties=tuple(properties),
        inherit_locations=inherit_locations,
        inherit_properties=inherit_properties,
    )
