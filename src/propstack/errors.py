"""プロパティソース解決の例外階層。

いずれもユニットのセットアップ失敗として呼び出し元へ伝播する。
リトライやフォールバックは行わない。
"""

from __future__ import annotations

from propstack.models._base import unit_name


class PropertySourceError(Exception):
    """プロパティソース解決に関する全例外の基底クラス。"""


class ConsistencyError(PropertySourceError):
    """同一レベル内の宣言が declaring_unit / inherit フラグで矛盾している。

    Attributes:
        attribute: 矛盾した属性名。
        unit: 宣言を保持するクラス。
        previous: レベル内で最初に処理した宣言の値。
        current: 矛盾を検出した宣言の値。
        aggregate_index: 矛盾が発生したレベル。
    """

    def __init__(
        self,
        attribute: str,
        unit: type[object],
        previous: object,
        current: object,
        aggregate_index: int,
    ) -> None:
        self.attribute = attribute
        self.unit = unit
        self.previous = previous
        self.current = current
        self.aggregate_index = aggregate_index
        super().__init__(
            f"Property source declarations on [{unit_name(unit)}] "
            f"(aggregate index {aggregate_index}) must declare the same value "
            f"for '{attribute}': got {_describe(previous)} and {_describe(current)}"
        )


class DefaultResourceNotFoundError(PropertySourceError):
    """locations/properties が空の宣言に対応する既定リソースが存在しない。"""

    def __init__(self, unit: type[object], resource: str) -> None:
        self.unit = unit
        self.resource = resource
        super().__init__(
            f"Could not detect default properties file for [{unit_name(unit)}]: "
            f"{resource} does not exist. Either declare 'locations' or "
            "'properties', or make the default properties file available."
        )


class MalformedEntryError(PropertySourceError):
    """インラインプロパティが厳密に1つの key/value に解析できない。"""

    def __init__(self, entry: str, reason: str) -> None:
        self.entry = entry
        self.reason = reason
        super().__init__(
            f"Failed to load exactly one inlined property from [{entry}]: {reason}"
        )


class ResourceLoadError(PropertySourceError):
    """解決済みロケーションのリソース読み込みに失敗した。"""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"Failed to load property source [{location}]: {reason}")


class PlaceholderResolutionError(PropertySourceError):
    """``${...}`` プレースホルダーを解決できない。"""

    def __init__(self, text: str, key: str, reason: str = "unresolvable") -> None:
        self.text = text
        self.key = key
        self.reason = reason
        super().__init__(
            f"Could not resolve placeholder '{key}' in value [{text}]: {reason}"
        )


def _describe(value: object) -> str:
    """エラーメッセージ用の値表記。クラスは完全修飾名で表す。"""
    if isinstance(value, type):
        return f"[{unit_name(value)}]"
    return repr(value)
