"""
Excepciones del motor de reconciliación.

Fatales (abortan la corrida): SchemaSyncError, SourceReadError, DestinationReadError.
Por registro (se cuentan, nunca abortan): RecordWriteError.
De entrada (la capa interactiva vuelve a preguntar): ValidationException.
"""
from typing import Any, Optional

from notion_importer.shared.exceptions.base import AppException


class DomainException(AppException):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, error_code: str = "DOMAIN_ERROR", details=None):
        super().__init__(
            message=message,
            error_code=error_code,
            details=details
        )


class ValidationException(DomainException):
    """Excepción para errores de validación de entradas."""

    def __init__(self, message: str, field: str = None):
        details = {"field": field} if field else None
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details
        )


class SchemaSyncError(DomainException):
    """El destino rechazó (o no admite) la creación/actualización de propiedades."""

    def __init__(self, message: str, database_id: str, properties: Optional[list[str]] = None):
        super().__init__(
            message=message,
            error_code="SCHEMA_SYNC_ERROR",
            details={"database_id": database_id, "properties": properties or []}
        )


class SourceReadError(DomainException):
    """Fallo al enumerar registros de la fuente (Excel, Mongo)."""

    def __init__(self, message: str, source: str):
        super().__init__(
            message=message,
            error_code="SOURCE_READ_ERROR",
            details={"source": source}
        )


class DestinationReadError(DomainException):
    """Fallo al leer el esquema o los registros existentes del destino."""

    def __init__(self, message: str, database_id: str):
        super().__init__(
            message=message,
            error_code="DESTINATION_READ_ERROR",
            details={"database_id": database_id}
        )


class RecordWriteError(DomainException):
    """Fallo al crear o actualizar un registro individual."""

    def __init__(self, message: str, record_label: Any, operation: str):
        super().__init__(
            message=message,
            error_code="RECORD_WRITE_ERROR",
            details={"record": str(record_label), "operation": operation}
        )
