"""宣言リゾルバー。

クラスの MRO を最も派生したクラスから順に走査し、各クラスに記録された
宣言を Declaration として返す。aggregate_index は MRO 上の位置。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from propstack.models.declaration import Declaration
from propstack.resolution._decorator import recorded_declarations


@runtime_checkable
class DeclarationResolver(Protocol):
    """ユニットに適用される宣言を列挙するプロトコル。

    返却する各 Declaration には aggregate_index と distance が付与済みであること。
    """

    def __call__(self, unit: type[object]) -> Sequence[Declaration]: ...


def resolve_declarations(unit: type[object]) -> tuple[Declaration, ...]:
    """unit とその基底クラスに記録された宣言を列挙する。

    多重継承では MRO の線形化順がそのままレベル順になる。
    ``object`` は宣言を持ち得ないため走査しない。

    Args:
        unit: 対象のクラス。

    Returns:
        aggregate_index 昇順（最も派生したクラスが先頭）の宣言タプル。
        宣言がなければ空タプル。

    Raises:
        TypeError: unit がクラスでない場合。
    """
    if not isinstance(unit, type):
        raise TypeError(f"unit must be a class, got {type(unit).__name__}")

    declarations: list[Declaration] = []
    for index, klass in enumerate(unit.__mro__):
        if klass is object:
            continue
        for recorded in recorded_declarations(klass):
            declarations.append(
                Declaration(
                    declaring_unit=klass,
                    locations=recorded.locations,
                    properties=recorded.properties,
                    inherit_locations=recorded.inherit_locations,
                    inherit_properties=recorded.inherit_properties,
                    aggregate_index=index,
                    distance=recorded.distance,
                )
            )
    return tuple(declarations)
