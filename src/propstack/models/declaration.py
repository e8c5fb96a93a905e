"""プロパティソース宣言モデル。

Declaration（宣言）、DeclarationLevel（階層レベル）、
PropertySourceAttributes（レベル単位の正規化済み属性）、
MergedPropertySources（最終マージ結果）を定義する。
"""

from __future__ import annotations

from pydantic import Field

from propstack.models._base import PropstackBaseModel


# =============================================================================
# Declaration（宣言）
# =============================================================================


class Declaration(PropstackBaseModel):
    """クラス階層上の1つのプロパティソース宣言。

    宣言リゾルバーが生成し、マージ処理は読み取りのみ行う。

    Attributes:
        declaring_unit: 宣言を保持するクラス。
        locations: 読み込むリソースのロケーション。
        properties: ``key=value`` 形式のインラインプロパティ。
        inherit_locations: 祖先レベルの locations を継承するか。
        inherit_properties: 祖先レベルの properties を継承するか。
        aggregate_index: 階層レベル。0 が最も派生したクラス。
        distance: メタ距離。0 は直接付与、1 以上は合成宣言経由。
    """

    declaring_unit: type[object]
    locations: tuple[str, ...] = ()
    properties: tuple[str, ...] = ()
    inherit_locations: bool = True
    inherit_properties: bool = True
    aggregate_index: int = Field(default=0, ge=0)
    distance: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        """locations と properties のどちらも宣言していないか。"""
        return not self.locations and not self.properties


class DeclarationLevel(PropstackBaseModel):
    """同一 aggregate_index に属する宣言の集合。

    declarations の順序はリゾルバーが返した順序を保持する。
    """

    aggregate_index: int = Field(ge=0)
    declarations: tuple[Declaration, ...] = Field(min_length=1)


# =============================================================================
# PropertySourceAttributes（正規化済み属性）
# =============================================================================


class PropertySourceAttributes(PropstackBaseModel):
    """1レベル分の宣言を1つに畳み込んだ属性。

    同一レベル内の宣言はすべて同じ declaring_unit / inherit_locations /
    inherit_properties を持つ。locations と properties はレベル内の
    処理順（メタ距離の降順）で連結されている。
    """

    declaring_unit: type[object]
    aggregate_index: int = Field(ge=0)
    locations: tuple[str, ...] = ()
    properties: tuple[str, ...] = ()
    inherit_locations: bool = True
    inherit_properties: bool = True


# =============================================================================
# MergedPropertySources（マージ結果）
# =============================================================================


class MergedPropertySources(PropstackBaseModel):
    """全レベルをマージした最終結果。

    どちらのシーケンスも最も祖先側のレベルが先頭、最も派生したレベルが末尾。
    ストアへ順に最高優先度で追加すると、末尾の要素が最も優先される。
    """

    locations: tuple[str, ...] = ()
    properties: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> MergedPropertySources:
        """宣言を持たないユニット向けの空の結果を返す。"""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.locations and not self.properties
