"""宣言リゾルバーパッケージ。

公開 API:
    property_source: クラスにプロパティソースを宣言するデコレーター。
    compose: 宣言を束ねた合成デコレーターを作る。
    resolve_declarations: クラス階層から宣言を列挙する既定リゾルバー。
    DeclarationResolver: リゾルバーのプロトコル。
"""

from propstack.resolution._decorator import (
    PropertySourceDecorator,
    RecordedDeclaration,
    compose,
    property_source,
)
from propstack.resolution._resolver import DeclarationResolver, resolve_declarations

__all__ = [
    "DeclarationResolver",
    "PropertySourceDecorator",
    "RecordedDeclaration",
    "compose",
    "property_source",
    "resolve_declarations",
]
