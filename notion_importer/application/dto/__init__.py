"""
DTOs de la capa de aplicación.
"""
from notion_importer.application.dto.import_dto import ReconciliationContext

__all__ = [
    "ReconciliationContext",
]
