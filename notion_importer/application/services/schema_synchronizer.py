"""
Sincronización del esquema de la base de Notion con el mapeo.

Verifica que existan las propiedades mapeadas: si no existen se crean, si
difiere el tipo se actualizan. Todo en un único request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from loguru import logger

from notion_importer.application.interfaces.notion_destination import NotionDestination
from notion_importer.domain.entities.mapping import PropertyMapping
from notion_importer.domain.entities.property_types import PropertyType
from notion_importer.shared.exceptions.domain import DestinationReadError, SchemaSyncError


@dataclass(frozen=True)
class SchemaChanges:
    """Cambios necesarios sobre el esquema: propiedades a crear y a cambiar de tipo."""

    to_add: dict[str, PropertyType] = field(default_factory=dict)
    to_retype: dict[str, PropertyType] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_retype

    def as_property_defs(self) -> dict[str, Any]:
        """Body `properties` para PATCH /databases/{id}."""
        defs: dict[str, Any] = {}
        for name, prop_type in {**self.to_add, **self.to_retype}.items():
            defs[name] = {prop_type.value: {}}
        return defs


def plan_schema_changes(
    headers: Sequence[str],
    mapping: PropertyMapping,
    current_schema: Mapping[str, str],
) -> SchemaChanges:
    """
    Calcula los dos conjuntos disjuntos de cambios.

    Función pura: no consulta el destino. Las propiedades marcadas
    `keep_existing` nunca cambian de tipo.
    """
    to_add: dict[str, PropertyType] = {}
    to_retype: dict[str, PropertyType] = {}
    for header in headers:
        spec = mapping.get(header)
        if spec is None:
            continue
        if spec.name not in current_schema:
            to_add[spec.name] = spec.type
        elif spec.keep_existing:
            continue
        elif current_schema[spec.name] != spec.type.value:
            to_retype[spec.name] = spec.type
    return SchemaChanges(to_add=to_add, to_retype=to_retype)


def _check_single_title(
    database_id: str,
    changes: SchemaChanges,
    current_schema: Mapping[str, str],
) -> None:
    new_titles = [
        name
        for name, prop_type in {**changes.to_add, **changes.to_retype}.items()
        if prop_type is PropertyType.TITLE
    ]
    if not new_titles:
        return
    existing_titles = [
        name for name, raw_type in current_schema.items()
        if raw_type == PropertyType.TITLE.value and name not in new_titles
    ]
    if existing_titles:
        raise SchemaSyncError(
            f'La base ya tiene la propiedad title "{existing_titles[0]}"; no se puede '
            f'agregar "{new_titles[0]}" como segundo title. Renombre el campo title '
            f'a "{existing_titles[0]}" al personalizar el mapeo.',
            database_id=database_id,
            properties=new_titles,
        )


class SchemaSynchronizer:
    """
    Asegura que el esquema destino tenga todas las propiedades mapeadas.

    Uso:
        synchronizer = SchemaSynchronizer(destination)
        new_props = synchronizer.ensure_schema(database_id, headers, mapping)
    """

    def __init__(self, destination: NotionDestination) -> None:
        self._destination = destination

    def ensure_schema(
        self,
        database_id: str,
        headers: Sequence[str],
        mapping: PropertyMapping,
    ) -> set[str]:
        """
        Crea/actualiza propiedades y retorna los nombres recién creados.

        Raises:
            DestinationReadError: no se pudo leer el esquema actual
            SchemaSyncError: el destino rechazó los cambios
        """
        try:
            current_schema = self._destination.get_schema(database_id)
        except Exception as e:
            raise DestinationReadError(
                f"No se pudo leer el esquema de la base {database_id}: {e}",
                database_id=database_id,
            ) from e

        changes = plan_schema_changes(headers, mapping, current_schema)
        if changes.is_empty:
            logger.info("No fue necesario crear/actualizar propiedades en Notion.")
            return set()

        _check_single_title(database_id, changes, current_schema)

        try:
            self._destination.update_schema(database_id, changes.as_property_defs())
        except Exception as e:
            raise SchemaSyncError(
                f"Error al asegurar las propiedades: {e}",
                database_id=database_id,
                properties=sorted({**changes.to_add, **changes.to_retype}),
            ) from e

        if changes.to_add:
            logger.success(f"Propiedades creadas: {', '.join(changes.to_add)}")
        if changes.to_retype:
            logger.success(f"Propiedades con tipo actualizado: {', '.join(changes.to_retype)}")
        return set(changes.to_add)
