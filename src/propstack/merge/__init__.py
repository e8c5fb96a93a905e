"""宣言マージパッケージ。

公開 API:
    merge_configuration: ユニットの宣言をロケーションとインラインプロパティにマージする。
"""

from propstack.merge._grouper import group_by_level
from propstack.merge._level import detect_default_resource, merge_level
from propstack.merge._locations import (
    convert_to_resource_paths,
    default_resource_location,
    package_resource_path,
)
from propstack.merge._reducer import (
    merge_configuration,
    merge_locations,
    merge_properties,
)

__all__ = [
    "convert_to_resource_paths",
    "default_resource_location",
    "detect_default_resource",
    "group_by_level",
    "merge_configuration",
    "merge_level",
    "merge_locations",
    "merge_properties",
    "package_resource_path",
]
