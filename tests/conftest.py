"""
Configuración de fixtures para pytest.
"""
from __future__ import annotations

import copy
from typing import Any, Optional

import pytest

from notion_importer.domain.entities.mapping import DestinationRecord


def _to_read_shape(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Convierte el valor escrito de una propiedad a la forma en que la API lo devuelve.

    title / rich_text agregan `plain_text` a cada segmento.
    """
    prop_type, value = next(iter(payload.items()))
    if prop_type in ("title", "rich_text"):
        value = [
            {**seg, "plain_text": seg.get("text", {}).get("content", "")}
            for seg in value
        ]
    return {"type": prop_type, prop_type: copy.deepcopy(value)}


class FakeNotionDestination:
    """
    Base de Notion en memoria que respeta el puerto NotionDestination.

    Fallas inyectables:
    - create_errors: {title: cantidad de fallas antes de aceptar}
    - update_errors: {record_id: cantidad de fallas}
    - fail_schema_update / fail_query / fail_get_schema
    """

    def __init__(self, schema: Optional[dict[str, str]] = None) -> None:
        self.schema: dict[str, str] = dict(schema or {})
        self.pages: list[dict[str, Any]] = []
        self.create_errors: dict[str, int] = {}
        self.update_errors: dict[str, int] = {}
        self.fail_schema_update = False
        self.fail_query = False
        self.fail_get_schema = False

        self.schema_updates: list[dict[str, Any]] = []
        self.create_calls: list[dict[str, Any]] = []
        self.update_calls: list[tuple[str, dict[str, Any]]] = []
        self.query_calls = 0

    # helpers de test -------------------------------------------------

    def add_page(self, properties: dict[str, Any]) -> str:
        """Agrega una página ya existente (properties en forma de escritura)."""
        page_id = f"page-{len(self.pages) + 1}"
        self.pages.append(
            {
                "id": page_id,
                "properties": {name: _to_read_shape(v) for name, v in properties.items()},
                "children": [],
            }
        )
        return page_id

    def page_titles(self) -> list[str]:
        titles = []
        for page in self.pages:
            for prop in page["properties"].values():
                if prop["type"] == "title":
                    titles.append("".join(seg["plain_text"] for seg in prop["title"]))
        return titles

    def _title_of(self, properties: dict[str, Any]) -> str:
        for value in properties.values():
            if "title" in value:
                return "".join(seg["text"]["content"] for seg in value["title"])
        return ""

    # puerto ------------------------------------------------------------

    def get_schema(self, database_id: str) -> dict[str, str]:
        if self.fail_get_schema:
            raise RuntimeError("schema no disponible")
        return dict(self.schema)

    def update_schema(self, database_id: str, property_defs: dict[str, Any]) -> None:
        self.schema_updates.append(copy.deepcopy(property_defs))
        if self.fail_schema_update:
            raise RuntimeError("validation_error: propiedad inválida")
        for name, definition in property_defs.items():
            self.schema[name] = next(iter(definition))

    def query_all_records(self, database_id: str) -> list[DestinationRecord]:
        self.query_calls += 1
        if self.fail_query:
            raise RuntimeError("timeout")
        return [
            DestinationRecord(record_id=p["id"], properties=copy.deepcopy(p["properties"]))
            for p in self.pages
        ]

    def create_record(
        self,
        database_id: str,
        properties: dict[str, Any],
        children: list[dict[str, Any]],
    ) -> str:
        self.create_calls.append({"properties": copy.deepcopy(properties), "children": children})
        title = self._title_of(properties)
        if self.create_errors.get(title, 0) > 0:
            self.create_errors[title] -= 1
            raise RuntimeError(f"rate limited ({title})")
        page_id = self.add_page(properties)
        self.pages[-1]["children"] = list(children)
        return page_id

    def update_record(self, record_id: str, properties: dict[str, Any]) -> None:
        self.update_calls.append((record_id, copy.deepcopy(properties)))
        if self.update_errors.get(record_id, 0) > 0:
            self.update_errors[record_id] -= 1
            raise RuntimeError(f"conflict ({record_id})")
        page = next(p for p in self.pages if p["id"] == record_id)
        for name, value in properties.items():
            page["properties"][name] = _to_read_shape(value)


@pytest.fixture
def destination() -> FakeNotionDestination:
    """Base vacía (sin propiedades ni páginas)."""
    return FakeNotionDestination()


@pytest.fixture
def make_destination():
    """Fábrica para bases con esquema inicial: make_destination({"Name": "title"})."""
    return FakeNotionDestination
