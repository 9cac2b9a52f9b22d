"""
Enumeraciones del dominio de importación.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class PropertyType(str, Enum):
    """
    Tipos de propiedad de una base de datos de Notion.

    El valor coincide con la clave que usa la API ("rich_text", "title", ...).
    """
    RICH_TEXT = "rich_text"
    TITLE = "title"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATE = "date"
    PEOPLE = "people"
    FILES = "files"
    CHECKBOX = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE_NUMBER = "phone_number"
    FORMULA = "formula"
    RELATION = "relation"
    ROLLUP = "rollup"
    CREATED_TIME = "created_time"
    CREATED_BY = "created_by"
    LAST_EDITED_TIME = "last_edited_time"
    LAST_EDITED_BY = "last_edited_by"
    STATUS = "status"

    @classmethod
    def from_api(cls, raw: Optional[str]) -> Optional["PropertyType"]:
        """Convierte el tipo devuelto por la API; None si es desconocido (p.ej. "unique_id")."""
        try:
            return cls(raw)
        except ValueError:
            return None


class DuplicatePolicy(str, Enum):
    """
    Política para registros cuya clave ya existe en el destino.

    - SKIP: se omiten (opción 1 del menú)
    - UPDATE_NEW_ONLY: se actualizan solo las propiedades recién creadas (opción 2)
    - NONE: no se buscan duplicados, todo se crea (opción 3)
    """
    SKIP = "skip"
    UPDATE_NEW_ONLY = "update_new_only"
    NONE = "none"


class WriteOutcome(str, Enum):
    """Resultado de escribir un registro en el destino."""
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"
