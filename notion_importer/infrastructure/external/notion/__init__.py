"""
Integración con la API REST de Notion.

- notion_client: HTTP crudo (requests, paginación, backoff)
- database_gateway: implementación del puerto NotionDestination
"""

from notion_importer.core.config import Settings
from notion_importer.infrastructure.external.notion.database_gateway import NotionDatabaseGateway
from notion_importer.infrastructure.external.notion.notion_client import (
    NotionApiError,
    NotionClient,
    NotionCredentials,
)


def build_from_settings(settings: Settings, *, token: str = "") -> NotionDatabaseGateway:
    """
    Constructor del gateway a partir de la configuración.

    Args:
        settings: Configuración cargada
        token: Token explícito (p. ej. ingresado por consola); si es vacío
            se usa NOTION_API_KEY
    """
    client = NotionClient(
        NotionCredentials(
            token=token or settings.NOTION_API_KEY,
            notion_version=settings.NOTION_VERSION,
        ),
        base_url=settings.NOTION_BASE_URL,
        timeout_s=settings.NOTION_TIMEOUT_S,
        max_retries=settings.NOTION_MAX_RETRIES,
    )
    return NotionDatabaseGateway(client, page_size=settings.NOTION_PAGE_SIZE)


__all__ = [
    "NotionApiError",
    "NotionClient",
    "NotionCredentials",
    "NotionDatabaseGateway",
    "build_from_settings",
]
