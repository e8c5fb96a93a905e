"""レベルグルーパー。宣言を aggregate_index ごとにまとめる。"""

from __future__ import annotations

from collections.abc import Iterable

from propstack.models.declaration import Declaration, DeclarationLevel


def group_by_level(declarations: Iterable[Declaration]) -> tuple[DeclarationLevel, ...]:
    """宣言を aggregate_index の昇順（最も派生したレベルが先頭）にグループ化する。

    各レベル内の宣言はリゾルバーが返した順序を保持する。
    この順序は後段の安定ソートの前提となる。
    """
    grouped: dict[int, list[Declaration]] = {}
    for declaration in declarations:
        grouped.setdefault(declaration.aggregate_index, []).append(declaration)
    return tuple(
        DeclarationLevel(aggregate_index=index, declarations=tuple(grouped[index]))
        for index in sorted(grouped)
    )
