"""
Entidades del dominio.
"""
from notion_importer.domain.entities.property_types import (
    PropertyType,
    DuplicatePolicy,
    WriteOutcome,
)
from notion_importer.domain.entities.mapping import (
    SourceRecord,
    PropertySpec,
    PropertyOverride,
    PropertyMapping,
    DestinationRecord,
)
from notion_importer.domain.entities.property_values import (
    PropertyValue,
    build_property_value,
)

__all__ = [
    "PropertyType",
    "DuplicatePolicy",
    "WriteOutcome",
    "SourceRecord",
    "PropertySpec",
    "PropertyOverride",
    "PropertyMapping",
    "DestinationRecord",
    "PropertyValue",
    "build_property_value",
]
