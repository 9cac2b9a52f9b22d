"""
Interfaz del destino (base de datos de Notion) que consume el motor.

Este contrato existe para:
- Que los servicios de reconciliación no dependan de HTTP directamente.
- Facilitar tests unitarios con un destino en memoria.
"""

from __future__ import annotations

from typing import Any, Protocol

from notion_importer.domain.entities.mapping import DestinationRecord


class NotionDestination(Protocol):
    """
    Operaciones remotas sobre una base de datos de Notion.

    Implementaciones:
    - NotionDatabaseGateway (API REST).
    - Fake en memoria para tests.
    """

    def get_schema(self, database_id: str) -> dict[str, str]:
        """Propiedades actuales: nombre -> tipo (tal como lo reporta la API)."""
        ...

    def update_schema(self, database_id: str, property_defs: dict[str, Any]) -> None:
        """Crea o cambia el tipo de propiedades en un único request."""
        ...

    def query_all_records(self, database_id: str) -> list[DestinationRecord]:
        """Lee todas las páginas de la base (paginando)."""
        ...

    def create_record(
        self,
        database_id: str,
        properties: dict[str, Any],
        children: list[dict[str, Any]],
    ) -> str:
        """Crea una página y retorna su id."""
        ...

    def update_record(self, record_id: str, properties: dict[str, Any]) -> None:
        """Actualiza propiedades de una página existente."""
        ...
