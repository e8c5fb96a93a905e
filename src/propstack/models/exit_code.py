"""終了コードの定義。"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    1 はプロパティソース解決の失敗、2 は CLI 層固有の入力エラー。
    """

    SUCCESS = 0
    CONFIGURATION_ERROR = 1
    INPUT_ERROR = 2
