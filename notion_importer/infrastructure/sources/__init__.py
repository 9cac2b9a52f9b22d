"""
Fuentes de registros tabulares.
"""

from notion_importer.infrastructure.sources.excel_source import ExcelSource, normalize_xlsx_path
from notion_importer.infrastructure.sources.mongo_source import (
    MongoSource,
    collect_headers,
    rename_id_field,
)

__all__ = [
    "ExcelSource",
    "MongoSource",
    "collect_headers",
    "normalize_xlsx_path",
    "rename_id_field",
]
