"""階層化設定ストアとインテグレーター。

公開 API:
    parse_inlined_properties: インラインプロパティを順序付きマップに変換する。
    apply_locations_to_store: ロケーションのリソースをストアに追加する。
    apply_inlined_properties_to_store: インラインプロパティをストアに追加する。
    apply_merged_property_sources: マージ結果をまとめて適用する。
    Environment: 既定のストア実装。
    DefaultResourceLoader: 既定のリソースローダー。
"""

from propstack.environment._integrator import (
    INLINED_PROPERTIES_SOURCE_NAME,
    apply_inlined_properties_to_store,
    apply_locations_to_store,
    apply_merged_property_sources,
)
from propstack.environment._loader import (
    CLASSPATH_PREFIX,
    DefaultResourceLoader,
    ResourceLoader,
    load_property_source,
)
from propstack.environment._properties import (
    InlinedPropertyMap,
    parse_inlined_properties,
    parse_properties_text,
)
from propstack.environment._store import (
    ConfigurationStore,
    Environment,
    PropertySource,
    substitute_placeholders,
)

__all__ = [
    "CLASSPATH_PREFIX",
    "INLINED_PROPERTIES_SOURCE_NAME",
    "ConfigurationStore",
    "DefaultResourceLoader",
    "Environment",
    "InlinedPropertyMap",
    "PropertySource",
    "ResourceLoader",
    "apply_inlined_properties_to_store",
    "apply_locations_to_store",
    "apply_merged_property_sources",
    "load_property_source",
    "parse_inlined_properties",
    "parse_properties_text",
    "substitute_placeholders",
]
