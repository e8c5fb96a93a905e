"""設定リゾルバー。

デフォルト値 < ユーザーグローバル設定 < pyproject.toml [tool.propstack]
< 明示的な上書き、の順に項目単位でマージする。
"""

from __future__ import annotations

from pathlib import Path

from propstack.config._loader import load_pyproject_config, load_user_config
from propstack.config._locator import find_pyproject_toml, get_user_config_path
from propstack.models.config import PropstackConfig


def merge_config_layers(
    *layers: dict[str, object] | None,
) -> dict[str, object]:
    """複数の設定レイヤーを項目単位でマージする。

    後のレイヤーが先のレイヤーを上書きする。None のレイヤーはスキップされる。

    Args:
        layers: マージ対象の設定辞書。低優先度から高優先度の順。

    Returns:
        マージ済みの設定辞書。
    """
    result: dict[str, object] = {}
    for layer in layers:
        if layer is not None:
            result.update(layer)
    return result


def filter_overrides(overrides: dict[str, object]) -> dict[str, object]:
    """上書き辞書から None 値を除外する。None は「未指定」を意味する。"""
    return {k: v for k, v in overrides.items() if v is not None}


def resolve_config(
    start_dir: Path | None = None,
    overrides: dict[str, object] | None = None,
) -> PropstackConfig:
    """設定ソースを解決し PropstackConfig を構築する。

    設定ファイルが存在しない場合は該当レイヤーをスキップする。
    全ファイルが存在しない場合はデフォルト値のみで構築する。

    Args:
        start_dir: pyproject.toml の探索開始ディレクトリ。None の場合はカレント。
        overrides: 明示的な上書き。None 値は未指定扱い。

    Returns:
        解決済みの PropstackConfig インスタンス。

    Raises:
        pydantic.ValidationError: マージ後の設定が不正な場合。
        tomllib.TOMLDecodeError: 設定ファイルの TOML 構文が不正な場合。
        PermissionError: 設定ファイルの読み取り権限がない場合。
        TypeError: [tool.propstack] がテーブルでない場合、
            または search_paths がリストでない場合。
    """
    effective_start = start_dir if start_dir is not None else Path.cwd()

    # Layer 1 (最低優先): ユーザーグローバル設定
    user_layer = load_user_config(get_user_config_path())

    # Layer 2: pyproject.toml [tool.propstack]
    pyproject_layer: dict[str, object] | None = None
    pyproject_path = find_pyproject_toml(effective_start)
    if pyproject_path is not None:
        pyproject_layer = load_pyproject_config(pyproject_path)

    # Layer 3 (最高優先): 明示的な上書き
    override_layer = filter_overrides(overrides) if overrides is not None else None

    merged = merge_config_layers(user_layer, pyproject_layer, override_layer)
    return PropstackConfig.model_validate(merged)
