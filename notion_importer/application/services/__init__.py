"""
Servicios del motor de reconciliación.

Cada servicio cubre una etapa: mapeo, esquema, duplicados y escritura.
El orquestador que los encadena vive en use_cases.
"""
from notion_importer.application.services.property_mapper import map_properties
from notion_importer.application.services.schema_synchronizer import (
    SchemaSynchronizer,
    SchemaChanges,
    plan_schema_changes,
)
from notion_importer.application.services.duplicate_resolver import (
    DuplicateResolver,
    DuplicateIndex,
    DuplicateMatch,
    Partition,
    extract_property_text,
)
from notion_importer.application.services.record_writer import (
    RecordWriter,
    PagePayload,
    FailedRecord,
    WriteReport,
)

__all__ = [
    # Mapeo
    "map_properties",
    # Esquema
    "SchemaSynchronizer",
    "SchemaChanges",
    "plan_schema_changes",
    # Duplicados
    "DuplicateResolver",
    "DuplicateIndex",
    "DuplicateMatch",
    "Partition",
    "extract_property_text",
    # Escritura
    "RecordWriter",
    "PagePayload",
    "FailedRecord",
    "WriteReport",
]
