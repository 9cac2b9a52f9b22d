"""
Fuente tabular: libro Excel (.xlsx) leído con openpyxl.

Convenciones:
- La primera fila de la hoja son los encabezados.
- Las celdas vacías no aparecen en el registro (igual que una clave ausente).
- Las filas completamente vacías se descartan.
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from notion_importer.domain.entities.mapping import SourceRecord
from notion_importer.shared.exceptions.domain import SourceReadError

XLSX_SUFFIX = ".xlsx"


def normalize_xlsx_path(path: str | Path) -> Path:
    """Agrega la extensión .xlsx si el nombre no la trae."""
    p = Path(path)
    if p.suffix.lower() != XLSX_SUFFIX:
        p = p.with_name(p.name + XLSX_SUFFIX)
    return p


def _header_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class ExcelSource:
    """
    Lector de hojas de un libro Excel.

    Uso:
        source = ExcelSource("clientes")        # -> clientes.xlsx
        headers, records = source.read("Hoja1")
    """

    def __init__(self, path: str | Path) -> None:
        self.path = normalize_xlsx_path(path)

    def _open(self):
        try:
            return load_workbook(self.path, read_only=True, data_only=True)
        except (OSError, InvalidFileException, zipfile.BadZipFile) as e:
            raise SourceReadError(
                f"No se pudo abrir el archivo Excel {self.path}: {e}",
                source=str(self.path),
            ) from e

    def list_sheets(self) -> list[str]:
        wb = self._open()
        try:
            return list(wb.sheetnames)
        finally:
            wb.close()

    def _rows(self, wb, sheet_name: str):
        if sheet_name not in wb.sheetnames:
            raise SourceReadError(
                f'La hoja "{sheet_name}" no existe en {self.path}',
                source=str(self.path),
            )
        return wb[sheet_name].iter_rows(values_only=True)

    def read_headers(self, sheet_name: str) -> list[str]:
        """Encabezados de la primera fila (se omiten celdas vacías)."""
        headers, _ = self.read(sheet_name)
        return headers

    def read(self, sheet_name: str) -> tuple[list[str], list[SourceRecord]]:
        """
        Lee encabezados y registros de una hoja.

        Returns:
            (headers, records): headers en orden de columna, records en orden de fila

        Raises:
            SourceReadError: archivo ilegible o hoja inexistente
        """
        wb = self._open()
        try:
            rows = self._rows(wb, sheet_name)
            first: Optional[tuple] = next(rows, None)
            if first is None:
                return [], []

            columns = [(i, _header_text(v)) for i, v in enumerate(first)]
            columns = [(i, h) for i, h in columns if h]
            headers = [h for _, h in columns]

            records: list[SourceRecord] = []
            for row in rows:
                record: SourceRecord = {}
                for i, header in columns:
                    value = row[i] if i < len(row) else None
                    if value is None or (isinstance(value, str) and value.strip() == ""):
                        continue
                    record[header] = value
                if record:
                    records.append(record)
        finally:
            wb.close()

        logger.debug(f'Hoja "{sheet_name}": {len(headers)} columnas, {len(records)} filas')
        return headers, records
