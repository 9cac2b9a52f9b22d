"""
Cliente mínimo de la API REST de Notion (sin SDKs externos).

Requisitos cubiertos:
- requests
- paginación por cursor (start_cursor / has_more / next_cursor)
- rate-limit/backoff (429, 5xx, errores de conexión)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import requests

DEFAULT_BASE_URL = "https://api.notion.com/v1"
DEFAULT_NOTION_VERSION = "2022-06-28"


@dataclass(frozen=True)
class NotionCredentials:
    token: str
    notion_version: str = DEFAULT_NOTION_VERSION


class NotionApiError(RuntimeError):
    """Error de integración con Notion."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotionClient:
    """
    Cliente HTTP de Notion.

    Importante:
    - No interpreta propiedades: devuelve el JSON de la API tal cual.
    - Los reintentos aquí son de transporte (429/5xx); el reintento por
      registro lo decide el RecordWriter.
    """

    def __init__(
        self,
        credentials: NotionCredentials,
        *,
        session: Optional[requests.Session] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: int = 30,
        max_retries: int = 3,
        min_backoff_s: float = 0.8,
        max_backoff_s: float = 20.0,
    ) -> None:
        self._creds = credentials
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._max_retries = max_retries
        self._min_backoff_s = min_backoff_s
        self._max_backoff_s = max_backoff_s
        self._session = session or requests.Session()

    # ------------------------------------------------------------------
    # Databases
    # ------------------------------------------------------------------

    def retrieve_database(self, database_id: str) -> dict[str, Any]:
        return self._request_json("GET", f"/databases/{database_id}")

    def update_database(self, database_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        return self._request_json(
            "PATCH", f"/databases/{database_id}", body={"properties": properties}
        )

    def query_database(
        self,
        database_id: str,
        *,
        start_cursor: Optional[str] = None,
        page_size: int = 100,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {"page_size": page_size}
        if start_cursor:
            body["start_cursor"] = start_cursor
        return self._request_json("POST", f"/databases/{database_id}/query", body=body)

    def iter_database_pages(
        self,
        database_id: str,
        *,
        page_size: int = 100,
    ) -> Iterable[dict[str, Any]]:
        """
        Itera todas las páginas de la base, en el orden que devuelve la API.

        - Maneja paginación por 'next_cursor' mientras 'has_more' sea True
        """
        cursor: Optional[str] = None
        while True:
            payload = self.query_database(database_id, start_cursor=cursor, page_size=page_size)
            for page in payload.get("results") or []:
                if not page.get("id"):
                    # Sin id la página no se puede actualizar.
                    raise NotionApiError("Notion devolvió una página sin 'id'")
                yield page

            cursor = payload.get("next_cursor")
            if not payload.get("has_more") or not cursor:
                break

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def create_page(
        self,
        database_id: str,
        properties: dict[str, Any],
        children: Optional[list[dict[str, Any]]] = None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "parent": {"database_id": database_id},
            "properties": properties,
        }
        if children:
            body["children"] = children
        return self._request_json("POST", "/pages", body=body)

    def update_page(self, page_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        return self._request_json("PATCH", f"/pages/{page_id}", body={"properties": properties})

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _backoff_seconds(self, attempt: int, retry_after: Optional[str] = None) -> float:
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                return self._min_backoff_s
        # Exponencial simple + jitter proporcional
        base = min(self._max_backoff_s, self._min_backoff_s * (2**attempt))
        return base + (0.15 * base)

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        body: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Request HTTP con backoff para 429/5xx y errores de conexión.

        Estrategia:
        - 429: respeta Retry-After si existe, si no exponencial con jitter simple.
        - 5xx / conexión: exponencial con jitter.
        - 4xx (no 429): error inmediato (validación, permisos, id inválido).
        """
        url = f"{self._base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self._creds.token}",
            "Notion-Version": self._creds.notion_version,
            "Content-Type": "application/json",
        }

        for attempt in range(self._max_retries + 1):
            try:
                resp = self._session.request(
                    method=method,
                    url=url,
                    json=body,
                    headers=headers,
                    timeout=self._timeout_s,
                )
            except requests.RequestException as e:
                if attempt >= self._max_retries:
                    raise NotionApiError(
                        f"Notion no respondió tras {attempt} reintentos: {e}"
                    ) from e
                time.sleep(self._backoff_seconds(attempt))
                continue

            if 200 <= resp.status_code < 300:
                return resp.json()

            # Errores recuperables
            if resp.status_code == 429 or 500 <= resp.status_code < 600:
                if attempt >= self._max_retries:
                    raise NotionApiError(
                        f"Notion error {resp.status_code} tras {attempt} reintentos: {resp.text}",
                        status_code=resp.status_code,
                    )
                time.sleep(self._backoff_seconds(attempt, resp.headers.get("Retry-After")))
                continue

            # Errores no recuperables
            raise NotionApiError(
                f"Notion request falló {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )

        raise NotionApiError("Se agotaron los reintentos contra la API de Notion")
