"""propstack ドメインモデルパッケージ。"""

from propstack.models._base import PropstackBaseModel, unit_name
from propstack.models.config import (
    DEFAULT_ENCODING,
    DEFAULT_RESOURCE_SUFFIX,
    PropstackConfig,
)
from propstack.models.declaration import (
    Declaration,
    DeclarationLevel,
    MergedPropertySources,
    PropertySourceAttributes,
)
from propstack.models.exit_code import ExitCode

__all__ = [
    "DEFAULT_ENCODING",
    "DEFAULT_RESOURCE_SUFFIX",
    "Declaration",
    "DeclarationLevel",
    "ExitCode",
    "MergedPropertySources",
    "PropertySourceAttributes",
    "PropstackBaseModel",
    "PropstackConfig",
    "unit_name",
]
