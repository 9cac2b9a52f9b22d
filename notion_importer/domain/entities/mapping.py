"""
Tipos del mapeo fuente -> Notion.

Se mantienen libres de I/O para poder testearlos fácilmente.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from notion_importer.domain.entities.property_types import PropertyType

SourceRecord = dict[str, Any]


@dataclass(frozen=True)
class PropertySpec:
    """
    Nombre y tipo de la propiedad de Notion que recibe un campo de la fuente.

    keep_existing: la propiedad ya existe con un tipo que el importador no
    conoce; su tipo no se toca y sus valores no se escriben.
    """

    name: str
    type: PropertyType
    keep_existing: bool = False


@dataclass(frozen=True)
class PropertyOverride:
    """
    Personalización pedida por el usuario para un campo.

    - name: nuevo nombre de la propiedad (None = mantener)
    - type: nuevo tipo (None = mantener)
    """

    name: Optional[str] = None
    type: Optional[PropertyType] = None


@dataclass(frozen=True)
class PropertyMapping:
    """
    Mapeo completo header -> PropertySpec para una corrida.

    Invariante: exactamente un header queda con tipo TITLE.
    """

    specs: dict[str, PropertySpec] = field(default_factory=dict)

    def __getitem__(self, header: str) -> PropertySpec:
        return self.specs[header]

    def __contains__(self, header: object) -> bool:
        return header in self.specs

    def __iter__(self) -> Iterator[str]:
        return iter(self.specs)

    def __len__(self) -> int:
        return len(self.specs)

    def get(self, header: str) -> Optional[PropertySpec]:
        return self.specs.get(header)

    def items(self):
        return self.specs.items()

    @property
    def title_header(self) -> str:
        for header, spec in self.specs.items():
            if spec.type is PropertyType.TITLE:
                return header
        raise KeyError("El mapeo no tiene propiedad title")

    def destination_name(self, header: str) -> str:
        """Nombre en Notion para el header (o el propio header si no está mapeado)."""
        spec = self.specs.get(header)
        return spec.name if spec else header


@dataclass(frozen=True)
class DestinationRecord:
    """
    Página existente en la base de datos de Notion.

    properties conserva la forma cruda de la API ({"type": ..., "<type>": ...}).
    """

    record_id: str
    properties: dict[str, Any]
