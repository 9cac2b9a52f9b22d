"""
Caso de uso: importar registros de una fuente tabular a una base de Notion.

Diseño (resumen):
- Mapea campos de la fuente a propiedades (nombre/tipo)
- Asegura el esquema de la base (crea / cambia tipo en un solo request)
- Si hay política de duplicados: lee toda la base, arma el índice y clasifica
- Actualiza duplicados y luego crea los registros nuevos (con un reintento)

Errores:
- Esquema rechazado o lectura fallida: se propagan y abortan la corrida.
- Fallos por registro: se cuentan en el resultado, nunca abortan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from loguru import logger

from notion_importer.application.dto.import_dto import ReconciliationContext
from notion_importer.application.interfaces.notion_destination import NotionDestination
from notion_importer.application.services.duplicate_resolver import (
    DuplicateIndex,
    DuplicateResolver,
    Partition,
)
from notion_importer.application.services.property_mapper import map_properties
from notion_importer.application.services.record_writer import (
    FailedRecord,
    ProgressCallback,
    RecordWriter,
)
from notion_importer.application.services.schema_synchronizer import SchemaSynchronizer
from notion_importer.domain.entities.mapping import PropertyMapping, SourceRecord
from notion_importer.domain.entities.property_types import DuplicatePolicy
from notion_importer.shared.exceptions.domain import DestinationReadError


@dataclass(frozen=True)
class ReconciliationResult:
    """Resumen de una corrida."""

    created: int
    updated: int
    skipped: int
    failed: int
    new_properties: frozenset[str] = frozenset()
    failed_records: tuple[FailedRecord, ...] = field(default_factory=tuple)

    @property
    def total(self) -> int:
        return self.created + self.updated + self.skipped + self.failed


def resolve_key_fields(
    key_fields: Sequence[str],
    headers: Sequence[str],
    policy: DuplicatePolicy,
) -> tuple[list[str], DuplicatePolicy]:
    """
    Filtra los campos clave a los que existen en la fuente.

    Si la política pide duplicados pero no queda ningún campo válido,
    se ignora la detección (política NONE).
    """
    if policy is DuplicatePolicy.NONE:
        return [], policy

    valid = [f for f in key_fields if f in headers]
    dropped = [f for f in key_fields if f not in headers]
    if dropped:
        logger.warning(f"Campos clave inexistentes en la fuente (se ignoran): {', '.join(dropped)}")
    if not valid:
        logger.warning("No se especificaron campos válidos para duplicados. Se ignorará la detección.")
        return [], DuplicatePolicy.NONE
    return valid, policy


class ReconciliationUseCase:
    """
    Orquestador de la importación para una base de Notion.

    Es el único componente que conoce a todos los servicios; cada servicio
    recibe solo lo que necesita.
    """

    def __init__(
        self,
        destination: NotionDestination,
        *,
        resolver: Optional[DuplicateResolver] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self._destination = destination
        self._synchronizer = SchemaSynchronizer(destination)
        self._resolver = resolver or DuplicateResolver()
        self._progress_callback = progress_callback

    def read_schema(self, database_id: str) -> dict[str, str]:
        """Esquema actual de la base (nombre -> tipo)."""
        try:
            return self._destination.get_schema(database_id)
        except Exception as e:
            raise DestinationReadError(
                f"No se pudo leer el esquema de la base {database_id}: {e}",
                database_id=database_id,
            ) from e

    def build_mapping(
        self,
        headers: Sequence[str],
        context: ReconciliationContext,
    ) -> PropertyMapping:
        """Lee el esquema actual y mapea los headers."""
        schema = self.read_schema(context.database_id)
        return map_properties(
            headers,
            schema,
            context.title_field,
            customize=context.customize,
            overrides=context.overrides,
        )

    def _build_partition(
        self,
        records: Sequence[SourceRecord],
        context: ReconciliationContext,
        mapping: PropertyMapping,
        key_fields: list[str],
        policy: DuplicatePolicy,
        new_properties: set[str],
    ) -> Partition:
        if policy is DuplicatePolicy.NONE:
            logger.opt(colors=True).info(
                "<bold>No se chequearán duplicados. Agregando todos los registros...</bold>"
            )
            return self._resolver.partition(records, None, key_fields, policy, mapping, new_properties)

        logger.opt(colors=True).info(
            "<bold>Obteniendo registros existentes en Notion para chequear duplicados...</bold>"
        )
        try:
            existing = self._destination.query_all_records(context.database_id)
        except Exception as e:
            raise DestinationReadError(
                f"No se pudieron leer los registros existentes: {e}",
                database_id=context.database_id,
            ) from e
        logger.info(f"Registros existentes en Notion: {len(existing)}")

        schema = self.read_schema(context.database_id)
        index: DuplicateIndex = self._resolver.build_index(existing, key_fields, schema, mapping)
        return self._resolver.partition(records, index, key_fields, policy, mapping, new_properties)

    def run(
        self,
        records: Sequence[SourceRecord],
        headers: Sequence[str],
        context: ReconciliationContext,
    ) -> ReconciliationResult:
        """
        Ejecuta una corrida completa.

        Args:
            records: Registros de la fuente, en orden
            headers: Campos detectados en la fuente
            context: Destino, title, política y personalizaciones

        Returns:
            ReconciliationResult: conteos de creados, actualizados, omitidos y fallidos

        Raises:
            ValidationException: title inválido o nombres de propiedad repetidos
            SchemaSyncError: Notion rechazó el esquema
            DestinationReadError: no se pudo leer el destino
        """
        key_fields, policy = resolve_key_fields(context.key_fields, headers, context.policy)

        mapping = self.build_mapping(headers, context)
        new_properties = self._synchronizer.ensure_schema(context.database_id, headers, mapping)

        partition = self._build_partition(
            records, context, mapping, key_fields, policy, new_properties
        )
        writer = RecordWriter(
            self._destination,
            context.database_id,
            mapping,
            progress_every=context.progress_every,
            progress_callback=self._progress_callback,
        )
        skip_report = writer.skip_all([*partition.to_skip, *partition.unchanged])

        updated = 0
        failed: list[FailedRecord] = []
        if policy is DuplicatePolicy.UPDATE_NEW_ONLY:
            if partition.to_update:
                logger.info(
                    f"Se encontraron {len(partition.to_update)} registros duplicados que serán "
                    f"actualizados (solo campos nuevos)."
                )
                update_report = writer.update_all(partition.to_update, field_filter=new_properties)
                updated = update_report.updated
                failed.extend(update_report.failed)
            else:
                logger.info("No se encontraron registros duplicados para actualizar.")

        created = 0
        if partition.to_create:
            logger.opt(colors=True).info(
                f"<bold>Agregando {len(partition.to_create)} registros no duplicados...</bold>"
            )
            create_report = writer.create_all(partition.to_create)
            created = create_report.created
            failed.extend(create_report.failed)
        else:
            logger.info("No se encontraron registros no duplicados para agregar.")

        result = ReconciliationResult(
            created=created,
            updated=updated,
            skipped=skip_report.skipped,
            failed=len(failed),
            new_properties=frozenset(new_properties),
            failed_records=tuple(failed),
        )
        logger.info(
            f"Importación completada. creados={result.created}, actualizados={result.updated}, "
            f"omitidos={result.skipped}, fallidos={result.failed}"
        )
        return result
