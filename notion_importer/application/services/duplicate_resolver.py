"""
Detección de duplicados contra el contenido actual de la base de Notion.

Flujo:
- Se arma un índice valor -> id de página por cada campo clave
  (una lectura completa de la base + una lectura del esquema).
- Cada registro de la fuente se clasifica en crear / omitir / actualizar.

Reglas de coincidencia:
- Los campos clave se revisan en el orden dado; la primera coincidencia
  decide y el resto no se mira.
- Si dos páginas comparten valor, gana la primera vista en el recorrido.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from loguru import logger

from notion_importer.domain.entities.mapping import (
    DestinationRecord,
    PropertyMapping,
    SourceRecord,
)
from notion_importer.domain.entities.property_types import DuplicatePolicy, PropertyType
from notion_importer.shared.utils.value_utils import is_blank, to_text


def _plain_text(segments: Optional[list[dict[str, Any]]]) -> str:
    return "".join(seg.get("plain_text", "") for seg in segments or [])


def extract_property_text(prop: Optional[Mapping[str, Any]], prop_type: Optional[str]) -> str:
    """
    Extrae el valor en texto de una propiedad según su tipo.

    title / rich_text concatenan sus segmentos; el resto devuelve su forma
    escalar. Tipos no soportados devuelven "" (y por lo tanto nunca coinciden).
    """
    if not prop or not prop_type:
        return ""

    if prop_type in (PropertyType.TITLE.value, PropertyType.RICH_TEXT.value):
        return _plain_text(prop.get(prop_type))
    if prop_type in (
        PropertyType.URL.value,
        PropertyType.EMAIL.value,
        PropertyType.PHONE_NUMBER.value,
    ):
        return prop.get(prop_type) or ""
    if prop_type == PropertyType.NUMBER.value:
        return to_text(prop.get("number"))
    if prop_type in (PropertyType.SELECT.value, PropertyType.STATUS.value):
        option = prop.get(prop_type) or {}
        return option.get("name") or ""
    if prop_type == PropertyType.MULTI_SELECT.value:
        return ",".join(item.get("name", "") for item in prop.get("multi_select") or [])
    if prop_type == PropertyType.CHECKBOX.value:
        return "true" if prop.get("checkbox") else "false"
    if prop_type == PropertyType.DATE.value:
        return (prop.get("date") or {}).get("start") or ""
    return ""


@dataclass
class DuplicateIndex:
    """
    Índice por campo clave: valor (string) -> id de página.

    Las claves del primer nivel son los campos de la fuente, no los nombres
    en Notion.
    """

    slices: dict[str, dict[str, str]] = field(default_factory=dict)

    def lookup(self, key_field: str, value: str) -> Optional[str]:
        return self.slices.get(key_field, {}).get(value)

    def size(self, key_field: str) -> int:
        return len(self.slices.get(key_field, {}))


@dataclass(frozen=True)
class DuplicateMatch:
    """Registro de la fuente que coincide con una página existente."""

    record: SourceRecord
    record_id: str
    key_field: str


@dataclass
class Partition:
    """
    Clasificación de los registros de una corrida.

    - to_create: no duplicados (o política NONE)
    - to_update: duplicados con datos en propiedades nuevas (UPDATE_NEW_ONLY)
    - to_skip: duplicados omitidos (SKIP)
    - unchanged: duplicados sin datos nuevos (UPDATE_NEW_ONLY); no se escriben
    """

    to_create: list[SourceRecord] = field(default_factory=list)
    to_update: list[DuplicateMatch] = field(default_factory=list)
    to_skip: list[DuplicateMatch] = field(default_factory=list)
    unchanged: list[DuplicateMatch] = field(default_factory=list)


def has_new_property_values(
    record: SourceRecord,
    mapping: PropertyMapping,
    new_properties: set[str],
) -> bool:
    """True si algún campo mapeado a una propiedad recién creada tiene valor."""
    for header, value in record.items():
        if mapping.destination_name(header) in new_properties and not is_blank(value):
            return True
    return False


class DuplicateResolver:
    """Arma el índice de duplicados y clasifica registros."""

    def build_index(
        self,
        destination_records: Iterable[DestinationRecord],
        key_fields: Sequence[str],
        destination_schema: Mapping[str, str],
        mapping: PropertyMapping,
    ) -> DuplicateIndex:
        """
        Llena el índice con los valores reales de Notion.

        Args:
            destination_records: Páginas existentes, en orden de lectura
            key_fields: Campos de la fuente usados como clave
            destination_schema: Esquema actual (nombre -> tipo)
            mapping: Mapeo de la corrida (para traducir campo -> propiedad)
        """
        index = DuplicateIndex(slices={key: {} for key in key_fields})
        prop_names = {key: mapping.destination_name(key) for key in key_fields}

        for key in key_fields:
            if prop_names[key] not in destination_schema:
                logger.warning(
                    f'La propiedad "{prop_names[key]}" (campo clave "{key}") no existe en Notion; '
                    f"no habrá coincidencias por ese campo."
                )

        for record in destination_records:
            for key in key_fields:
                prop_name = prop_names[key]
                prop_type = destination_schema.get(prop_name)
                value = extract_property_text(record.properties.get(prop_name), prop_type)
                if value and value not in index.slices[key]:
                    index.slices[key][value] = record.record_id

        for key in key_fields:
            logger.debug(f'Índice de duplicados "{key}": {index.size(key)} valores')
        return index

    @staticmethod
    def find_match(
        record: SourceRecord,
        index: DuplicateIndex,
        key_fields: Sequence[str],
    ) -> Optional[DuplicateMatch]:
        """Primera coincidencia según el orden de `key_fields`, o None."""
        for key in key_fields:
            value = record.get(key)
            if value is None:
                continue
            record_id = index.lookup(key, to_text(value))
            if record_id is not None:
                return DuplicateMatch(record=record, record_id=record_id, key_field=key)
        return None

    def partition(
        self,
        records: Sequence[SourceRecord],
        index: Optional[DuplicateIndex],
        key_fields: Sequence[str],
        policy: DuplicatePolicy,
        mapping: PropertyMapping,
        new_properties: set[str],
    ) -> Partition:
        """
        Clasifica los registros respetando el orden de la fuente.

        Con política NONE (o sin índice) todos los registros van a `to_create`.
        """
        result = Partition()
        if policy is DuplicatePolicy.NONE or index is None:
            result.to_create = list(records)
            return result

        for record in records:
            match = self.find_match(record, index, key_fields)
            if match is None:
                result.to_create.append(record)
            elif policy is DuplicatePolicy.SKIP:
                result.to_skip.append(match)
            elif has_new_property_values(record, mapping, new_properties):
                result.to_update.append(match)
            else:
                result.unchanged.append(match)

        return result
