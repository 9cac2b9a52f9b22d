"""
Casos de uso de la aplicación.
"""
from notion_importer.application.use_cases.reconciliation_use_cases import (
    ReconciliationUseCase,
    ReconciliationResult,
)

__all__ = ["ReconciliationUseCase", "ReconciliationResult"]
