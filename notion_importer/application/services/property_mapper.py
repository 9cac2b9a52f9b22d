"""
Mapeo de campos de la fuente a propiedades de Notion.

Este módulo NO toca la API: recibe el esquema actual ya leído y las
personalizaciones ya respondidas por el usuario.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from loguru import logger

from notion_importer.domain.entities.mapping import (
    PropertyMapping,
    PropertyOverride,
    PropertySpec,
)
from notion_importer.domain.entities.property_types import PropertyType
from notion_importer.shared.exceptions.domain import ValidationException


def default_property_type(
    header: str,
    destination_schema: Mapping[str, str],
    title_field: str,
) -> PropertyType:
    """
    Tipo por defecto de un header.

    - title si es el campo elegido como título
    - el tipo de la propiedad homónima en Notion, si existe y es conocido
    - rich_text en cualquier otro caso

    Una propiedad homónima de tipo title que no es el campo elegido cae a
    rich_text: la base solo admite un title.
    """
    if header == title_field:
        return PropertyType.TITLE
    existing = PropertyType.from_api(destination_schema.get(header))
    if existing is None or existing is PropertyType.TITLE:
        return PropertyType.RICH_TEXT
    return existing


def _existing_title_name(destination_schema: Mapping[str, str]) -> Optional[str]:
    for name, raw_type in destination_schema.items():
        if raw_type == PropertyType.TITLE.value:
            return name
    return None


def _apply_type_override(
    header: str,
    title_field: str,
    current: PropertyType,
    requested: PropertyType,
) -> PropertyType:
    if header == title_field and requested is not PropertyType.TITLE:
        logger.warning(
            f'Se ignora el cambio de tipo de "{header}" a "{requested.value}": '
            f"es el campo title y la base necesita exactamente uno."
        )
        return current
    if header != title_field and requested is PropertyType.TITLE:
        logger.warning(
            f'Se ignora el cambio de tipo de "{header}" a "title": '
            f'el title ya es "{title_field}".'
        )
        return current
    return requested


def map_properties(
    headers: Sequence[str],
    destination_schema: Mapping[str, str],
    title_field: str,
    *,
    customize: bool = False,
    overrides: Optional[Mapping[str, PropertyOverride]] = None,
) -> PropertyMapping:
    """
    Mapea cada header a {nombre, tipo} en Notion.

    Si la base ya tiene un title con otro nombre y el usuario no renombró el
    campo title, el campo se escribe en ese title existente.

    Args:
        headers: Campos detectados en la fuente
        destination_schema: Propiedades actuales de la base (nombre -> tipo)
        title_field: Header elegido como title
        customize: Si True se aplican `overrides`; si False se ignoran
        overrides: Renombres / cambios de tipo por header

    Returns:
        PropertyMapping: Mapeo con exactamente un title

    Raises:
        ValidationException: title_field no está en headers, o dos headers
            terminan con el mismo nombre de propiedad
    """
    if title_field not in headers:
        raise ValidationException(
            f'El campo title "{title_field}" no está entre los campos de la fuente',
            field="title_field",
        )

    active_overrides = dict(overrides or {}) if customize else {}
    existing_title = _existing_title_name(destination_schema)
    specs: dict[str, PropertySpec] = {}
    used_names: dict[str, str] = {}

    for header in headers:
        override = active_overrides.get(header)
        prop_name = header
        prop_type = default_property_type(header, destination_schema, title_field)
        renamed = False
        retyped = False

        if override is not None:
            if override.name and override.name.strip():
                prop_name = override.name.strip()
                renamed = True
            if override.type is not None:
                prop_type = _apply_type_override(header, title_field, prop_type, override.type)
                retyped = prop_type is override.type

        if (
            header == title_field
            and not renamed
            and existing_title is not None
            and existing_title != header
            and existing_title not in headers
        ):
            logger.info(
                f'El campo title "{header}" se escribe en la propiedad title existente '
                f'"{existing_title}".'
            )
            prop_name = existing_title

        keep_existing = (
            header != title_field
            and not retyped
            and prop_name in destination_schema
            and PropertyType.from_api(destination_schema[prop_name]) is None
        )
        if keep_existing:
            logger.info(
                f'La propiedad "{prop_name}" es de tipo {destination_schema[prop_name]}; '
                f"se mantiene sin cambios."
            )

        if prop_name in used_names:
            raise ValidationException(
                f'Los campos "{used_names[prop_name]}" y "{header}" se mapean a la misma '
                f'propiedad "{prop_name}"',
                field=header,
            )
        used_names[prop_name] = header
        specs[header] = PropertySpec(name=prop_name, type=prop_type, keep_existing=keep_existing)

    return PropertyMapping(specs=specs)
