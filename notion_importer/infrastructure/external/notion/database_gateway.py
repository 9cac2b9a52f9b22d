"""
Adaptador NotionClient -> NotionDestination.

Traduce las respuestas crudas de la API a lo que consume el motor:
esquema como {nombre: tipo} y páginas como DestinationRecord.
"""

from __future__ import annotations

from typing import Any

from notion_importer.domain.entities.mapping import DestinationRecord
from notion_importer.infrastructure.external.notion.notion_client import NotionClient


class NotionDatabaseGateway:
    """Implementación REST del destino."""

    def __init__(self, client: NotionClient, *, page_size: int = 100) -> None:
        self._client = client
        self._page_size = page_size

    def get_schema(self, database_id: str) -> dict[str, str]:
        database = self._client.retrieve_database(database_id)
        properties = database.get("properties") or {}
        return {name: prop.get("type", "") for name, prop in properties.items()}

    def update_schema(self, database_id: str, property_defs: dict[str, Any]) -> None:
        self._client.update_database(database_id, property_defs)

    def query_all_records(self, database_id: str) -> list[DestinationRecord]:
        return [
            DestinationRecord(record_id=page["id"], properties=page.get("properties") or {})
            for page in self._client.iter_database_pages(database_id, page_size=self._page_size)
        ]

    def create_record(
        self,
        database_id: str,
        properties: dict[str, Any],
        children: list[dict[str, Any]],
    ) -> str:
        page = self._client.create_page(database_id, properties, children)
        return page.get("id", "")

    def update_record(self, record_id: str, properties: dict[str, Any]) -> None:
        self._client.update_page(record_id, properties)
