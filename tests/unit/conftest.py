"""単体テスト共通のヘルパー。"""

from __future__ import annotations

from propstack.errors import ResourceLoadError


class InMemoryLoader:
    """ロケーションとバイト列の辞書で動作するテスト用ローダー。

    load() の呼び出し履歴を loaded に記録する。
    """

    def __init__(self, resources: dict[str, bytes] | None = None) -> None:
        self._resources = dict(resources or {})
        self.loaded: list[str] = []

    def exists(self, location: str) -> bool:
        return location in self._resources

    def load(self, location: str) -> bytes:
        self.loaded.append(location)
        try:
            return self._resources[location]
        except KeyError:
            raise ResourceLoadError(location, "resource does not exist") from None


def make_unit(name: str = "SampleUnit", module: str = "fixturepkg.sample") -> type:
    """任意のモジュールに定義されたように見えるクラスを生成する。

    テストモジュール自身の __module__ は import モードに依存するため、
    既定リソースのパスを検証するテストではこのヘルパーを使う。
    """
    return type(name, (), {"__module__": module})
