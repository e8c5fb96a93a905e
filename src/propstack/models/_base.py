"""全ドメインモデルの基底クラス。

extra="forbid" と frozen=True で厳格かつ不変なモデルを一元管理する。
"""

from pydantic import BaseModel, ConfigDict


class PropstackBaseModel(BaseModel):
    """全ドメインモデルの基底クラス。extra="forbid" で厳格モードを一元管理。"""

    model_config = ConfigDict(extra="forbid", frozen=True)


def unit_name(unit: type[object]) -> str:
    """ユニット（クラス）の完全修飾名を返す。

    エラーメッセージとデフォルトリソース名の両方で同じ表記を使うため、
    ``__module__`` と ``__qualname__`` を連結した文字列に統一する。
    """
    return f"{unit.__module__}.{unit.__qualname__}"
