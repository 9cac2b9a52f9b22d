"""
Valores tipados de propiedades de Notion.

Cada variante sabe serializarse (`encode`) al objeto que espera la API en
`properties.<nombre>` y, si corresponde, aportar bloques auxiliares para el
contenido de la página (solo FilesValue lo hace: agrega una imagen).

`build_property_value` es el único punto de entrada: recibe el tipo destino y
el valor crudo de la fuente, y devuelve la variante correspondiente.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Optional

from loguru import logger

from notion_importer.domain.entities.property_types import PropertyType
from notion_importer.shared.utils.value_utils import chunk_text, split_tags, to_text

# Límite de la API para el contenido de un segmento de rich text.
RICH_TEXT_SEGMENT_LIMIT = 2000

FILE_REFERENCE_NAME = "Archivo"


def _rich_text(text: str) -> list[dict[str, Any]]:
    return [{"text": {"content": part}} for part in chunk_text(text, RICH_TEXT_SEGMENT_LIMIT)]


@dataclass(frozen=True)
class PropertyValue:
    """Variante base. Las subclases definen `type` y `encode`."""

    type: ClassVar[PropertyType]
    writable: ClassVar[bool] = True

    def encode(self) -> dict[str, Any]:
        raise NotImplementedError

    def blocks(self) -> list[dict[str, Any]]:
        """Bloques auxiliares para el contenido de la página (por defecto ninguno)."""
        return []


@dataclass(frozen=True)
class TitleValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.TITLE
    text: str = ""

    def encode(self) -> dict[str, Any]:
        return {"title": _rich_text(self.text)}


@dataclass(frozen=True)
class RichTextValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.RICH_TEXT
    text: str = ""

    def encode(self) -> dict[str, Any]:
        return {"rich_text": _rich_text(self.text)}


@dataclass(frozen=True)
class NumberValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.NUMBER
    number: Optional[float] = None

    def encode(self) -> dict[str, Any]:
        return {"number": self.number}


@dataclass(frozen=True)
class CheckboxValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.CHECKBOX
    checked: bool = False

    def encode(self) -> dict[str, Any]:
        return {"checkbox": self.checked}


@dataclass(frozen=True)
class SelectValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.SELECT
    name: Optional[str] = None

    def encode(self) -> dict[str, Any]:
        return {"select": {"name": self.name} if self.name else None}


@dataclass(frozen=True)
class StatusValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.STATUS
    name: Optional[str] = None

    def encode(self) -> dict[str, Any]:
        return {"status": {"name": self.name} if self.name else None}


@dataclass(frozen=True)
class MultiSelectValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.MULTI_SELECT
    names: tuple[str, ...] = ()

    def encode(self) -> dict[str, Any]:
        return {"multi_select": [{"name": n} for n in self.names]}


@dataclass(frozen=True)
class UrlValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.URL
    url: Optional[str] = None

    def encode(self) -> dict[str, Any]:
        return {"url": self.url}


@dataclass(frozen=True)
class EmailValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.EMAIL
    email: Optional[str] = None

    def encode(self) -> dict[str, Any]:
        return {"email": self.email}


@dataclass(frozen=True)
class PhoneNumberValue(PropertyValue):
    type: ClassVar[PropertyType] = PropertyType.PHONE_NUMBER
    phone_number: Optional[str] = None

    def encode(self) -> dict[str, Any]:
        return {"phone_number": self.phone_number}


@dataclass(frozen=True)
class DateValue(PropertyValue):
    """Fecha de inicio sin fecha de fin."""

    type: ClassVar[PropertyType] = PropertyType.DATE
    start: Optional[str] = None

    def encode(self) -> dict[str, Any]:
        return {"date": {"start": self.start} if self.start else None}


@dataclass(frozen=True)
class FilesValue(PropertyValue):
    """
    Referencia a un archivo externo.

    Si hay URL, además del valor de la propiedad se agrega un bloque de imagen
    al contenido de la página.
    """

    type: ClassVar[PropertyType] = PropertyType.FILES
    url: Optional[str] = None

    def encode(self) -> dict[str, Any]:
        if not self.url:
            return {"files": []}
        return {
            "files": [
                {"name": FILE_REFERENCE_NAME, "type": "external", "external": {"url": self.url}}
            ]
        }

    def blocks(self) -> list[dict[str, Any]]:
        if not self.url:
            return []
        return [
            {
                "object": "block",
                "type": "image",
                "image": {"type": "external", "external": {"url": self.url}},
            }
        ]


@dataclass(frozen=True)
class UnwritableValue(PropertyValue):
    """
    Tipos que la API calcula o que requieren IDs de Notion
    (people, relation, formula, rollup, created_*, last_edited_*).
    No se escriben.
    """

    writable: ClassVar[bool] = False
    target_type: PropertyType = PropertyType.FORMULA

    def encode(self) -> dict[str, Any]:
        return {}


def parse_number(text: str) -> Optional[float]:
    """
    Convierte texto a float.

    Vacío -> None. No numérico o no finito (nan, inf) -> None con warning,
    porque la API no acepta NaN en JSON.
    """
    if not text.strip():
        return None
    try:
        number = float(text.strip())
    except ValueError:
        logger.warning(f"Valor no numérico para propiedad number: {text!r}. Se guarda vacío.")
        return None
    if not math.isfinite(number):
        logger.warning(f"Valor no finito para propiedad number: {text!r}. Se guarda vacío.")
        return None
    return number


_BUILDERS: dict[PropertyType, Callable[[str], PropertyValue]] = {
    PropertyType.TITLE: lambda t: TitleValue(text=t),
    PropertyType.RICH_TEXT: lambda t: RichTextValue(text=t),
    PropertyType.NUMBER: lambda t: NumberValue(number=parse_number(t)),
    PropertyType.CHECKBOX: lambda t: CheckboxValue(checked=t.lower() == "true"),
    PropertyType.SELECT: lambda t: SelectValue(name=t or None),
    PropertyType.STATUS: lambda t: StatusValue(name=t or None),
    PropertyType.MULTI_SELECT: lambda t: MultiSelectValue(names=tuple(split_tags(t))),
    PropertyType.URL: lambda t: UrlValue(url=t or None),
    PropertyType.EMAIL: lambda t: EmailValue(email=t or None),
    PropertyType.PHONE_NUMBER: lambda t: PhoneNumberValue(phone_number=t or None),
    PropertyType.DATE: lambda t: DateValue(start=t or None),
    PropertyType.FILES: lambda t: FilesValue(url=t or None),
}


def build_property_value(prop_type: PropertyType, raw: Any) -> PropertyValue:
    """
    Construye la variante tipada para un valor crudo de la fuente.

    Args:
        prop_type: Tipo de la propiedad destino
        raw: Valor de la fuente (cualquier escalar o None)

    Returns:
        PropertyValue: Variante lista para `encode()`
    """
    builder = _BUILDERS.get(prop_type)
    if builder is None:
        return UnwritableValue(target_type=prop_type)
    return builder(to_text(raw))
