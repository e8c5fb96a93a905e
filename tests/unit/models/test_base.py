"""PropstackBaseModel と共通ユーティリティのテスト。"""

import pytest
from pydantic import ValidationError

from propstack.models._base import PropstackBaseModel, unit_name


class SampleModel(PropstackBaseModel):
    """テスト用のサブクラス。"""

    name: str
    value: int


class TestPropstackBaseModelExtraForbid:
    """extra="forbid" により未定義フィールドが拒否されることを検証。"""

    def test_valid_fields_accepted(self) -> None:
        model = SampleModel(name="sample", value=42)
        assert model.name == "sample"
        assert model.value == 42

    def test_extra_field_rejected(self) -> None:
        """未定義フィールドを渡すと ValidationError が発生する。"""
        with pytest.raises(ValidationError, match="extra_forbidden"):
            SampleModel(name="sample", value=42, unknown="x")  # type: ignore[call-arg]


class TestPropstackBaseModelFrozen:
    """frozen=True により生成後の変更が拒否されることを検証。"""

    def test_assignment_rejected(self) -> None:
        model = SampleModel(name="sample", value=1)
        with pytest.raises(ValidationError, match="frozen_instance"):
            model.value = 2  # type: ignore[misc]

    def test_hashable(self) -> None:
        """frozen モデルはハッシュ可能で等価比較できる。"""
        assert hash(SampleModel(name="a", value=1)) == hash(
            SampleModel(name="a", value=1)
        )


class Outer:
    class Inner:
        pass


class TestUnitName:
    """unit_name の完全修飾名を検証。"""

    def test_top_level_class(self) -> None:
        assert unit_name(SampleModel) == f"{__name__}.SampleModel"

    def test_nested_class_uses_qualname(self) -> None:
        assert unit_name(Outer.Inner) == f"{__name__}.Outer.Inner"
