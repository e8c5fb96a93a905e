"""プロパティソース宣言デコレーター。

``@property_source(...)`` はクラス自身の ``__dict__`` に宣言を記録する。
同一クラスへの複数付与（繰り返し宣言）と、``compose()`` による
合成デコレーター経由のメタ宣言をサポートする。
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, TypeVar

from pydantic import Field

from propstack.models._base import PropstackBaseModel

DECLARATIONS_ATTR: Final[str] = "__propstack_declarations__"
"""クラスに記録された宣言を保持する属性名。"""

_C = TypeVar("_C", bound=type)


class RecordedDeclaration(PropstackBaseModel):
    """クラスに記録された宣言。declaring_unit と aggregate_index は解決時に付与する。"""

    locations: tuple[str, ...] = ()
    properties: tuple[str, ...] = ()
    inherit_locations: bool = True
    inherit_properties: bool = True
    distance: int = Field(default=0, ge=0)

    def nested(self) -> RecordedDeclaration:
        """合成デコレーターに取り込まれた際の、メタ距離を1つ深めた宣言を返す。"""
        return self.model_copy(update={"distance": self.distance + 1})


class PropertySourceDecorator:
    """クラスに1つ以上の宣言を記録するデコレーター。

    デコレーターは下から上へ適用されるため、記録時は既存の宣言の前に挿入し、
    ソース上の記述順（上から下）を保持する。
    """

    def __init__(self, declarations: Iterable[RecordedDeclaration]) -> None:
        self._declarations = tuple(declarations)

    @property
    def declarations(self) -> tuple[RecordedDeclaration, ...]:
        return self._declarations

    def __call__(self, cls: _C) -> _C:
        if not isinstance(cls, type):
            raise TypeError(
                f"property_source can only decorate classes, got {type(cls).__name__}"
            )
        existing: tuple[RecordedDeclaration, ...] = cls.__dict__.get(
            DECLARATIONS_ATTR, ()
        )
        setattr(cls, DECLARATIONS_ATTR, (*self._declarations, *existing))
        return cls


def property_source(
    *,
    locations: Iterable[str] = (),
    properties: Iterable[str] = (),
    inherit_locations: bool = True,
    inherit_properties: bool = True,
) -> PropertySourceDecorator:
    """テストクラスにプロパティソースを宣言するデコレーターを返す。

    locations と properties の両方を省略した場合、マージ時に
    ``<クラス名>.properties`` という既定リソースの検出が行われる。

    Args:
        locations: 読み込むリソースのロケーション。相対パスはクラスの
            パッケージ基準、``/`` 始まりはクラスパスルート基準で解釈される。
        properties: ``key=value`` 形式のインラインプロパティ。
        inherit_locations: 親クラスの locations を継承するか。
        inherit_properties: 親クラスの properties を継承するか。

    Returns:
        クラスデコレーター。

    Raises:
        TypeError: locations / properties に単一の文字列が渡された場合。
    """
    for name, value in (("locations", locations), ("properties", properties)):
        if isinstance(value, str):
            raise TypeError(f"'{name}' must be an iterable of strings, not a string")
    return PropertySourceDecorator(
        [
            RecordedDeclaration(
                locations=tuple(locations),
                properties=tuple(properties),
                inherit_locations=inherit_locations,
                inherit_properties=inherit_properties,
            )
        ]
    )


def compose(
    *decorators: PropertySourceDecorator,
) -> PropertySourceDecorator:
    """複数の宣言を束ねた合成デコレーターを作る。

    合成デコレーターで付与された宣言は、直接付与された宣言よりメタ距離が1つ深い。
    同一レベルでは直接付与された宣言が優先される。

    Args:
        decorators: 束ねる ``property_source`` デコレーター（合成済みも可）。

    Returns:
        合成デコレーター。
    """
    return PropertySourceDecorator(
        declaration.nested()
        for decorator in decorators
        for declaration in decorator.declarations
    )


def recorded_declarations(cls: type) -> tuple[RecordedDeclaration, ...]:
    """クラス自身に記録された宣言を返す。親クラスの宣言は含まない。"""
    return tuple(cls.__dict__.get(DECLARATIONS_ATTR, ()))
