"""Typer アプリケーション定義。

show: クラスのプロパティソース宣言をマージして表示する。
parse: インラインプロパティの解析結果を表示する。
"""

from __future__ import annotations

import importlib
import importlib.metadata
import logging
import sys
import tomllib
from enum import StrEnum
from pathlib import Path
from typing import Annotated, assert_never

import typer
from pydantic import ValidationError

from propstack.config import resolve_config
from propstack.environment import (
    DefaultResourceLoader,
    Environment,
    apply_merged_property_sources,
    parse_inlined_properties,
)
from propstack.errors import PropertySourceError
from propstack.merge import merge_configuration
from propstack.models._base import PropstackBaseModel, unit_name
from propstack.models.config import PropstackConfig
from propstack.models.declaration import MergedPropertySources
from propstack.models.exit_code import ExitCode

_TARGET_SEPARATOR = ":"


class OutputFormat(StrEnum):
    """show / parse の出力形式。"""

    TEXT = "text"
    JSON = "json"


class InputError(Exception):
    """CLI 引数で指定された対象を解決できない。"""


class EffectiveProperty(PropstackBaseModel):
    """実効プロパティ1件とその提供元ソース。"""

    value: str
    source: str


class ShowReport(PropstackBaseModel):
    """show サブコマンドの出力内容。"""

    unit: str
    locations: tuple[str, ...]
    properties: tuple[str, ...]
    effective: dict[str, EffectiveProperty] | None = None


class ParseReport(PropstackBaseModel):
    """parse サブコマンドの JSON 出力内容。"""

    properties: dict[str, str]


app = typer.Typer(
    name="propstack",
    help="Resolve layered test property sources declared on Python classes.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    """--version 指定時にバージョン番号を出力して終了する。"""
    if value:
        print(importlib.metadata.version("propstack"))
        raise typer.Exit()


def main() -> None:
    """CLI エントリポイント。pyproject.toml の [project.scripts] から呼び出される。"""
    app()


@app.callback()
def root_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log resolution details to stderr.")
    ] = False,
) -> None:
    """Resolve layered test property sources declared on Python classes."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


@app.command()
def show(
    target: Annotated[
        str,
        typer.Argument(
            help=(
                "Class to inspect, as 'package.module:ClassName'. "
                "Modules in the current directory are importable."
            )
        ),
    ],
    resolve: Annotated[
        bool,
        typer.Option(
            "--resolve/--no-resolve",
            help="Load the merged sources and print the effective properties.",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", help="Output format: text or json.")
    ] = OutputFormat.TEXT,
) -> None:
    """Show the merged locations and inlined properties of a class."""
    config = _load_config()
    _ensure_cwd_importable()
    try:
        unit = load_unit(target)
    except InputError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None

    loader = DefaultResourceLoader(config.search_paths)
    try:
        merged = merge_configuration(unit, loader=loader, config=config)
        effective = _resolve_effective(merged, loader, config) if resolve else None
    except PropertySourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.CONFIGURATION_ERROR) from None

    report = ShowReport(
        unit=unit_name(unit),
        locations=merged.locations,
        properties=merged.properties,
        effective=effective,
    )
    print(_format_report(report, output_format))


@app.command()
def parse(
    entries: Annotated[
        list[str], typer.Argument(help="Inlined properties such as 'key=value'.")
    ],
    output_format: Annotated[
        OutputFormat, typer.Option("--format", help="Output format: text or json.")
    ] = OutputFormat.TEXT,
) -> None:
    """Parse inlined properties and print the resulting ordered map."""
    try:
        parsed = parse_inlined_properties(entries)
    except PropertySourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=ExitCode.CONFIGURATION_ERROR) from None

    if output_format == OutputFormat.JSON:
        print(ParseReport(properties=parsed).model_dump_json(indent=2))
    elif output_format == OutputFormat.TEXT:
        for key, value in parsed.items():
            print(f"{key}={value}")
    else:
        assert_never(output_format)


# --- ヘルパー ---


def load_unit(target: str) -> type[object]:
    """``package.module:ClassName`` 形式の文字列からクラスを取得する。

    ClassName はネストしたクラス（``Outer.Inner``）でもよい。

    Raises:
        InputError: 形式が不正、モジュールを import できない、
            属性が存在しない、またはクラスでない場合。
    """
    module_name, separator, qualname = target.partition(_TARGET_SEPARATOR)
    if not separator or not module_name or not qualname:
        raise InputError(
            f"Invalid target '{target}': expected 'package.module:ClassName'"
        )
    try:
        obj: object = importlib.import_module(module_name)
    except ImportError as e:
        raise InputError(f"Cannot import module '{module_name}': {e}") from e
    for attr in qualname.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise InputError(f"'{module_name}' has no attribute '{qualname}'") from None
    if not isinstance(obj, type):
        raise InputError(f"'{target}' is not a class")
    return obj


def _ensure_cwd_importable() -> None:
    """カレントディレクトリを sys.path の先頭に加える。

    コンソールスクリプトとして起動した場合、sys.path[0] はスクリプトの
    ディレクトリになり、作業ディレクトリのモジュールを import できない。
    """
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)


def _load_config() -> PropstackConfig:
    """カレントディレクトリ基準で設定を解決する。失敗時は終了コード 2。"""
    try:
        return resolve_config()
    except (ValidationError, tomllib.TOMLDecodeError, TypeError, OSError) as e:
        print(
            f"Error: Invalid propstack configuration: {e}\n"
            "Check [tool.propstack] in pyproject.toml "
            "and ~/.config/propstack/config.toml.",
            file=sys.stderr,
        )
        raise typer.Exit(code=ExitCode.INPUT_ERROR) from None


def _resolve_effective(
    merged: MergedPropertySources,
    loader: DefaultResourceLoader,
    config: PropstackConfig,
) -> dict[str, EffectiveProperty]:
    """マージ結果を新しい Environment に適用し、実効プロパティを求める。"""
    environment = Environment(
        ignore_unresolvable_placeholders=config.ignore_unresolvable_placeholders
    )
    apply_merged_property_sources(environment, loader, merged, encoding=config.encoding)
    effective: dict[str, EffectiveProperty] = {}
    for key in environment.as_dict():
        source = next(s for s in environment if key in s)
        value = environment.get_property(key)
        assert value is not None
        effective[key] = EffectiveProperty(value=value, source=source.name)
    return effective


def _format_report(report: ShowReport, output_format: OutputFormat) -> str:
    """レポートを指定形式の文字列に変換する。"""
    if output_format == OutputFormat.JSON:
        return report.model_dump_json(indent=2)
    if output_format == OutputFormat.TEXT:
        return _format_text(report)
    assert_never(output_format)


def _format_text(report: ShowReport) -> str:
    lines = [f"Unit: {report.unit}", "", "Locations:"]
    lines.extend(f"  {location}" for location in report.locations)
    if not report.locations:
        lines.append("  (none)")
    lines.extend(["", "Inlined Properties:"])
    lines.extend(f"  {entry}" for entry in report.properties)
    if not report.properties:
        lines.append("  (none)")
    if report.effective is not None:
        lines.extend(["", "Effective Properties:"])
        for key, prop in report.effective.items():
            lines.append(f"  {key}={prop.value}  [{prop.source}]")
        if not report.effective:
            lines.append("  (none)")
    return "\n".join(lines)
