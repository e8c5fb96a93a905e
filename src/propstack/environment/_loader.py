"""リソースローダー。

ロケーション文字列からリソースの存在確認とバイト列の読み込みを行い、
読み込んだリソースを PropertySource に変換する。

対応するロケーション:
    classpath:a/b/c.ext  パッケージ ``a.b`` 内のリソース ``c.ext``。
                         パッケージを import できなければ検索パスのルートを走査する。
    file:/path, file:///path, /path, path  ファイルシステム上のパス。
"""

from __future__ import annotations

import logging
import re
import sys
import tomllib
from collections.abc import Iterable, Mapping
from importlib.resources import files
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Final, Protocol, runtime_checkable

from propstack.environment._properties import parse_properties_text
from propstack.environment._store import PropertySource
from propstack.errors import ResourceLoadError
from propstack.models.config import DEFAULT_ENCODING

logger = logging.getLogger(__name__)

CLASSPATH_PREFIX: Final[str] = "classpath:"
FILE_PREFIX: Final[str] = "file:"

URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]+:")
"""URL スキーム付きロケーションの判定パターン。1文字のスキームはドライブレターとみなす。"""

_TOML_SUFFIX: Final[str] = ".toml"


@runtime_checkable
class ResourceLoader(Protocol):
    """ロケーション文字列からリソースを取得するプロトコル。"""

    def exists(self, location: str) -> bool:
        """リソースが存在するか。"""
        ...

    def load(self, location: str) -> bytes:
        """リソースの内容を読み込む。

        Raises:
            ResourceLoadError: リソースが存在しない、または読み込めない場合。
        """
        ...


class DefaultResourceLoader:
    """classpath: / file: / ファイルシステムパスに対応する既定のローダー。

    Args:
        search_paths: classpath: 解決時に sys.path より先に走査するルート。
    """

    def __init__(self, search_paths: Iterable[str | Path] = ()) -> None:
        self._search_paths = tuple(Path(p) for p in search_paths)

    @property
    def search_paths(self) -> tuple[Path, ...]:
        return self._search_paths

    def exists(self, location: str) -> bool:
        return self._resolve(location) is not None

    def load(self, location: str) -> bytes:
        resource = self._resolve(location)
        if resource is None:
            raise ResourceLoadError(location, "resource does not exist")
        try:
            return resource.read_bytes()
        except OSError as e:
            raise ResourceLoadError(location, f"{type(e).__name__}: {e}") from e

    # --- 解決 ---

    def _resolve(self, location: str) -> Traversable | None:
        """ロケーションを読み込み可能なリソースに解決する。見つからなければ None。"""
        if location.startswith(CLASSPATH_PREFIX):
            return self._resolve_classpath(location.removeprefix(CLASSPATH_PREFIX))
        if location.startswith(FILE_PREFIX):
            return _existing_file(Path(_strip_file_url(location)))
        if URL_PATTERN.match(location):
            return None
        return _existing_file(Path(location))

    def _resolve_classpath(self, path: str) -> Traversable | None:
        path = path.lstrip("/")
        if not path:
            return None
        package, _, name = path.rpartition("/")
        if package:
            resource = _package_resource(package.replace("/", "."), name)
            if resource is not None:
                return resource
        for root in (*self._search_paths, *(Path(p or ".") for p in sys.path)):
            resource = _existing_file(root / path)
            if resource is not None:
                logger.debug("Resolved classpath:%s under root %s", path, root)
                return resource
        logger.debug("No resource found for classpath:%s", path)
        return None


def _strip_file_url(location: str) -> str:
    """``file:`` / ``file://`` 接頭辞を取り除きパス部分を返す。"""
    path = location.removeprefix(FILE_PREFIX)
    if path.startswith("//"):
        path = path[2:]
    return path


def _existing_file(path: Path) -> Path | None:
    try:
        return path if path.is_file() else None
    except OSError:
        return None


def _package_resource(package: str, name: str) -> Traversable | None:
    """importlib.resources でパッケージ内リソースを探す。

    パッケージ名として不正な経路や import できないパッケージは None。
    """
    if not all(part.isidentifier() for part in package.split(".")):
        return None
    try:
        resource = files(package) / name
    except (ModuleNotFoundError, TypeError):
        return None
    return resource if resource.is_file() else None


# =============================================================================
# PropertySource への変換
# =============================================================================


def _flatten_toml(data: Mapping[str, object], prefix: str = "") -> dict[str, str]:
    """ネストしたテーブルをドット区切りキーの平坦な辞書に変換する。"""
    flat: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten_toml(value, f"{full_key}."))
        elif isinstance(value, list):
            flat[full_key] = ",".join(_toml_scalar(v) for v in value)
        else:
            flat[full_key] = _toml_scalar(value)
    return flat


def _toml_scalar(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_property_source(
    loader: ResourceLoader,
    location: str,
    *,
    encoding: str = DEFAULT_ENCODING,
) -> PropertySource:
    """ロケーションのリソースを読み込み PropertySource を構築する。

    ``.toml`` は tomllib で読み込みドット区切りキーに平坦化する。
    それ以外は properties 形式として解析する。ソース名はロケーション文字列。

    Args:
        loader: リソースローダー。
        location: プレースホルダー解決済みのロケーション。
        encoding: properties 形式の文字コード。

    Returns:
        読み込んだプロパティを保持する PropertySource。

    Raises:
        ResourceLoadError: 読み込み・デコード・解析のいずれかに失敗した場合。
    """
    data = loader.load(location)
    try:
        if location.endswith(_TOML_SUFFIX):
            properties = _flatten_toml(tomllib.loads(data.decode("utf-8")))
        else:
            properties = parse_properties_text(data.decode(encoding))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError, ValueError) as e:
        raise ResourceLoadError(location, f"{type(e).__name__}: {e}") from e
    return PropertySource(name=location, properties=properties)
