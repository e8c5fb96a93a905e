"""設定管理モデル。

[tool.propstack] およびユーザーグローバル設定で指定できる項目を定義する。
"""

from __future__ import annotations

import codecs
from typing import Annotated, Final

from pydantic import Field, StrictBool, StringConstraints, field_validator

from propstack.models._base import PropstackBaseModel

DEFAULT_RESOURCE_SUFFIX: Final[str] = ".properties"
"""デフォルトリソース検出で使用する拡張子。"""

DEFAULT_ENCODING: Final[str] = "utf-8"
"""リソース読み込み時の既定エンコーディング。"""


class PropstackConfig(PropstackBaseModel):
    """全設定項目を統合した不変モデル。

    デフォルト値のみで有効なインスタンスを構築可能。
    """

    # デフォルトリソース検出
    default_suffix: str = Field(default=DEFAULT_RESOURCE_SUFFIX, min_length=2)

    # リソース読み込み
    encoding: str = Field(default=DEFAULT_ENCODING, min_length=1)
    search_paths: tuple[Annotated[str, StringConstraints(min_length=1)], ...] = ()

    # プレースホルダー解決
    ignore_unresolvable_placeholders: StrictBool = False

    @field_validator("default_suffix")
    @classmethod
    def validate_default_suffix(cls, v: str) -> str:
        """拡張子がドットで始まることを検証する。"""
        if not v.startswith("."):
            msg = f"Invalid default_suffix '{v}': must start with '.'"
            raise ValueError(msg)
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Python が認識できるコーデック名であることを検証する。"""
        try:
            codecs.lookup(v)
        except LookupError:
            msg = f"Unknown encoding '{v}'"
            raise ValueError(msg) from None
        return v
