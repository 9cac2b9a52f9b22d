"""
Escritura de registros en la base de Notion.

- create: arma propiedades + bloques auxiliares y crea la página.
- update: solo propiedades (opcionalmente filtradas por nombre).

Los errores por registro no se propagan: se registran y se cuentan.
Las creaciones fallidas se reintentan una sola vez, al terminar la primera
pasada. Las actualizaciones fallidas no se reintentan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence

from loguru import logger

from notion_importer.application.interfaces.notion_destination import NotionDestination
from notion_importer.application.services.duplicate_resolver import DuplicateMatch
from notion_importer.domain.entities.mapping import PropertyMapping, SourceRecord
from notion_importer.domain.entities.property_types import WriteOutcome
from notion_importer.domain.entities.property_values import build_property_value
from notion_importer.shared.exceptions.domain import RecordWriteError
from notion_importer.shared.utils.value_utils import to_text

ProgressCallback = Callable[[str, int, int], None]

UNTITLED_LABEL = "Sin título"


@dataclass(frozen=True)
class PagePayload:
    """Body listo para la API: `properties` y `children` (bloques)."""

    properties: dict[str, Any]
    children: list[dict[str, Any]]


@dataclass(frozen=True)
class FailedRecord:
    """Registro que no se pudo escribir, con el error que lo causó."""

    record: SourceRecord
    error: RecordWriteError


@dataclass
class WriteReport:
    """Conteos de una tanda de escrituras."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: list[FailedRecord] = field(default_factory=list)


class RecordWriter:
    """
    Traduce registros de la fuente a páginas de Notion y los escribe.

    Uso:
        writer = RecordWriter(destination, database_id, mapping)
        report = writer.create_all(records)
    """

    def __init__(
        self,
        destination: NotionDestination,
        database_id: str,
        mapping: PropertyMapping,
        *,
        progress_every: int = 50,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self._destination = destination
        self._database_id = database_id
        self._mapping = mapping
        self._progress_every = progress_every
        self._progress_callback = progress_callback
        self._warned_unwritable: set[str] = set()

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------

    def build_payload(
        self,
        record: SourceRecord,
        field_filter: Optional[set[str]] = None,
    ) -> PagePayload:
        """
        Construye `properties` y `children` para un registro.

        Args:
            record: Registro de la fuente
            field_filter: Si se indica, solo se escriben las propiedades
                cuyo nombre en Notion esté en este conjunto
        """
        properties: dict[str, Any] = {}
        children: list[dict[str, Any]] = []

        for header, value in record.items():
            spec = self._mapping.get(header)
            if spec is None:
                logger.debug(f'Campo "{header}" sin mapeo; se omite')
                continue
            if field_filter is not None and spec.name not in field_filter:
                continue

            if spec.keep_existing:
                self._warn_unwritable(spec.name, "desconocido")
                continue
            prop_value = build_property_value(spec.type, value)
            if not prop_value.writable:
                self._warn_unwritable(spec.name, spec.type.value)
                continue

            properties[spec.name] = prop_value.encode()
            children.extend(prop_value.blocks())

        return PagePayload(properties=properties, children=children)

    def _warn_unwritable(self, prop_name: str, type_label: str) -> None:
        if prop_name in self._warned_unwritable:
            return
        self._warned_unwritable.add(prop_name)
        logger.warning(
            f'La propiedad "{prop_name}" es de tipo {type_label} y no se puede '
            f"escribir desde la importación; se omite."
        )

    def record_label(self, record: SourceRecord) -> str:
        """Valor del campo title del registro, para logs."""
        label = to_text(record.get(self._mapping.title_header))
        return label or UNTITLED_LABEL

    # ------------------------------------------------------------------
    # Operaciones individuales
    # ------------------------------------------------------------------

    def _try_create(self, record: SourceRecord) -> Optional[RecordWriteError]:
        payload = self.build_payload(record)
        try:
            self._destination.create_record(
                self._database_id, payload.properties, payload.children
            )
        except Exception as e:
            return RecordWriteError(
                f"Error al agregar registro: {e}",
                record_label=self.record_label(record),
                operation="create",
            )
        return None

    def _try_update(
        self,
        record_id: str,
        record: SourceRecord,
        field_filter: Optional[set[str]],
    ) -> Optional[RecordWriteError]:
        payload = self.build_payload(record, field_filter=field_filter)
        try:
            self._destination.update_record(record_id, payload.properties)
        except Exception as e:
            return RecordWriteError(
                f"Error al actualizar duplicado: {e}",
                record_label=self.record_label(record),
                operation="update",
            )
        return None

    def create(self, record: SourceRecord) -> WriteOutcome:
        """Crea una página (sin reintento). Retorna CREATED o FAILED."""
        error = self._try_create(record)
        if error is not None:
            logger.error(error.message)
            return WriteOutcome.FAILED
        logger.success(f"Registro agregado: {self.record_label(record)}")
        return WriteOutcome.CREATED

    def update(
        self,
        record_id: str,
        record: SourceRecord,
        field_filter: Optional[set[str]] = None,
    ) -> WriteOutcome:
        """Actualiza una página existente. Retorna UPDATED o FAILED."""
        error = self._try_update(record_id, record, field_filter)
        if error is not None:
            logger.error(error.message)
            return WriteOutcome.FAILED
        logger.info(f"Registro duplicado actualizado: {self.record_label(record)}")
        return WriteOutcome.UPDATED

    def skip(self, match: DuplicateMatch) -> WriteOutcome:
        """Deja un duplicado sin escribir. No hace requests; retorna SKIPPED."""
        logger.info(
            f'Registro duplicado omitido ({match.key_field}: {match.record.get(match.key_field)})'
        )
        return WriteOutcome.SKIPPED

    # ------------------------------------------------------------------
    # Tandas
    # ------------------------------------------------------------------

    def _notify_progress(self, phase: str, done: int, total: int) -> None:
        if self._progress_every <= 0 or done % self._progress_every != 0:
            return
        logger.opt(colors=True).info(f"<bold>{phase.capitalize()}: {done}/{total} registros...</bold>")
        if self._progress_callback is not None:
            self._progress_callback(phase, done, total)

    def skip_all(self, matches: Iterable[DuplicateMatch]) -> WriteReport:
        report = WriteReport()
        for match in matches:
            if self.skip(match) is WriteOutcome.SKIPPED:
                report.skipped += 1
        return report

    def update_all(
        self,
        matches: Sequence[DuplicateMatch],
        field_filter: Optional[set[str]] = None,
    ) -> WriteReport:
        """Actualiza duplicados en orden. Los fallos se informan y no se reintentan."""
        report = WriteReport()
        total = len(matches)
        for i, match in enumerate(matches, start=1):
            error = self._try_update(match.record_id, match.record, field_filter)
            if error is None:
                report.updated += 1
                logger.info(f"Registro duplicado actualizado: {self.record_label(match.record)}")
            else:
                logger.error(error.message)
                report.failed.append(FailedRecord(record=match.record, error=error))
            self._notify_progress("actualizados", i, total)
        return report

    def create_all(self, records: Iterable[SourceRecord]) -> WriteReport:
        """
        Crea registros en orden y reintenta una vez los que fallaron.

        Returns:
            WriteReport: creados (primera pasada + reintento) y fallidos definitivos
        """
        report = WriteReport()
        pending = list(records)
        total = len(pending)
        first_pass_failed: list[SourceRecord] = []

        for i, record in enumerate(pending, start=1):
            error = self._try_create(record)
            if error is None:
                report.created += 1
                logger.success(f"Registro agregado: {self.record_label(record)}")
            else:
                logger.error(error.message)
                first_pass_failed.append(record)
            self._notify_progress("agregados", i, total)

        if not first_pass_failed:
            return report

        logger.warning(f"Reintentando {len(first_pass_failed)} registros fallidos...")
        for record in first_pass_failed:
            error = self._try_create(record)
            if error is None:
                report.created += 1
                logger.success(f"Registro agregado tras reintento: {self.record_label(record)}")
            else:
                logger.error(f"Error en reintento: {error.message}")
                report.failed.append(FailedRecord(record=record, error=error))

        if report.failed:
            logger.warning(
                f"{len(report.failed)} registros no pudieron ser exportados incluso tras reintentos."
            )
        return report
