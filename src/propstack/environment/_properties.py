"""プロパティ行パーサー。

慣習的な properties ファイルの1行文法（``key=value`` / ``key:value``、
``#`` ``!`` コメント行、バックスラッシュエスケープ、行継続）を実装する。

インラインプロパティは厳密モード（1エントリ = 1プロパティ、区切り文字必須）、
リソースファイルは寛容モード（空白区切り・キーのみの行も許容）で解析する。
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from typing import Final, NamedTuple

from propstack.errors import MalformedEntryError

_WHITESPACE: Final[frozenset[str]] = frozenset(" \t\f")
"""キー・値の前後で読み飛ばす空白文字。改行は物理行の区切りとして別扱い。"""

_SEPARATORS: Final[frozenset[str]] = frozenset("=:")

_COMMENT_PREFIXES: Final[frozenset[str]] = frozenset("#!")

_ESCAPES: Final[dict[str, str]] = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}

_HEX_DIGITS: Final[frozenset[str]] = frozenset("0123456789abcdefABCDEF")

_LINE_BREAK: Final[re.Pattern[str]] = re.compile(r"\r\n|\r|\n")
"""物理行の区切り。str.splitlines と異なり \\x85 や \\u2028 などでは分割しない。"""


class PropertyLine(NamedTuple):
    """1論理行の解析結果。"""

    key: str
    value: str
    has_separator: bool


class InlinedPropertyMap(dict[str, str]):
    """インラインプロパティの順序付きマップ。

    キーの順序は最初に出現した順。同じキーが再び現れた場合は
    位置を変えずに値のみ上書きする。
    """

    def insert_or_update(self, key: str, value: str) -> None:
        """キーが未登録なら末尾に追加し、登録済みなら値を置き換える。"""
        self[key] = value


# =============================================================================
# 行分割
# =============================================================================


def _ends_with_continuation(line: str) -> bool:
    """行末のバックスラッシュが奇数個なら行継続。"""
    count = len(line) - len(line.rstrip("\\"))
    return count % 2 == 1


def _strip_leading(line: str) -> str:
    index = 0
    while index < len(line) and line[index] in _WHITESPACE:
        index += 1
    return line[index:]


def iter_logical_lines(text: str) -> Iterator[str]:
    """テキストを論理行に分割する。空行とコメント行は除外される。

    行継続では末尾のバックスラッシュを取り除き、次の物理行の先頭空白を
    読み飛ばして連結する。コメント行は継続しない。
    """
    physical = iter(_LINE_BREAK.split(text))
    for raw in physical:
        line = _strip_leading(raw)
        if not line or line[0] in _COMMENT_PREFIXES:
            continue
        while _ends_with_continuation(line):
            line = line[:-1]
            following = next(physical, None)
            if following is None:
                break
            line += _strip_leading(following)
        yield line


# =============================================================================
# 1行の解析
# =============================================================================


def _unescape(text: str) -> str:
    """バックスラッシュエスケープを展開する。

    Raises:
        ValueError: ``\\u`` の後に16進4桁が続かない場合。
    """
    if "\\" not in text:
        return text
    chars: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        index += 1
        if char != "\\" or index >= len(text):
            chars.append(char)
            continue
        escaped = text[index]
        index += 1
        if escaped == "u":
            digits = text[index : index + 4]
            if len(digits) != 4 or any(d not in _HEX_DIGITS for d in digits):
                raise ValueError(f"Malformed \\uxxxx encoding: \\u{digits}")
            chars.append(chr(int(digits, 16)))
            index += 4
        else:
            chars.append(_ESCAPES.get(escaped, escaped))
    return "".join(chars)


def _has_unescaped_separator(line: str) -> bool:
    """行内のどこかにエスケープされていない ``=`` または ``:`` があるか。"""
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS:
            return True
        index += 1
    return False


def parse_property_line(line: str) -> PropertyLine:
    """1論理行をキーと値に分割する。

    キーは最初のエスケープされていない ``=`` ``:`` または空白で終わる。
    区切り文字の前後の空白は読み飛ばし、値の末尾空白は保持する。

    Args:
        line: 先頭空白を除去済みの論理行。

    Returns:
        キー・値・明示的な区切り文字（``=`` / ``:``）の有無。

    Raises:
        ValueError: エスケープシーケンスが不正な場合。
    """
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1
    key_end = min(index, len(line))

    while index < len(line) and line[index] in _WHITESPACE:
        index += 1
    has_separator = index < len(line) and line[index] in _SEPARATORS
    if has_separator:
        index += 1
        while index < len(line) and line[index] in _WHITESPACE:
            index += 1

    return PropertyLine(
        key=_unescape(line[:key_end]),
        value=_unescape(line[index:]),
        has_separator=has_separator,
    )


# =============================================================================
# 公開 API
# =============================================================================


def parse_inlined_properties(inlined_properties: Iterable[str]) -> InlinedPropertyMap:
    """インラインプロパティを順序付きマップに変換する。

    空文字列・空白のみのエントリはスキップする。各エントリは仮想的な
    properties ファイルとして解析され、厳密に1つのプロパティでなければならない。
    最初の区切り文字のみがキーと値を分けるため ``"a=1=2"`` は
    キー ``a``、値 ``1=2`` になる。キーが空白で終わる ``"a b=c"`` は
    キー ``a``、値 ``b=c``。

    Args:
        inlined_properties: ``key=value`` 形式の文字列。

    Returns:
        キーの初出順を保持し、後勝ちで値を上書きしたマップ。

    Raises:
        MalformedEntryError: エントリが 0 個または複数のプロパティに解析される場合、
            ``=`` ``:`` を1つも含まない場合、キーが空の場合、エスケープが不正な場合。
    """
    result = InlinedPropertyMap()
    for entry in inlined_properties:
        if not entry.strip():
            continue
        lines = list(iter_logical_lines(entry))
        if len(lines) != 1:
            raise MalformedEntryError(entry, f"found {len(lines)} properties")
        try:
            parsed = parse_property_line(lines[0])
        except ValueError as e:
            raise MalformedEntryError(entry, str(e)) from e
        if not _has_unescaped_separator(lines[0]):
            raise MalformedEntryError(entry, "missing '=' or ':' separator")
        if not parsed.key:
            raise MalformedEntryError(entry, "empty key")
        result.insert_or_update(parsed.key, parsed.value)
    return result


def parse_properties_text(text: str) -> dict[str, str]:
    """properties 形式のテキスト全体を解析する。

    リソースファイル向けの寛容モード。空白のみの区切り（``key value``）や
    キーのみの行（値は空文字列）も受け付ける。同一キーは後勝ち。

    Raises:
        ValueError: エスケープシーケンスが不正な場合。
    """
    properties: dict[str, str] = {}
    for line in iter_logical_lines(text):
        parsed = parse_property_line(line)
        properties[parsed.key] = parsed.value
    return properties
