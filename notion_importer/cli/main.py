"""
CLI: Excel / MongoDB -> Notion.

Ejecución:
  notion-import excel
  notion-import excel --file clientes --sheet Hoja1 --database-id <id>
  notion-import mongo --database crm --collection contactos

Lo que no se pasa por argumento se pregunta por consola.

Variables de entorno (o .env):
  - NOTION_API_KEY (si falta, se pide)
  - MONGO_URI (solo para `mongo`)
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import click
from dotenv import load_dotenv
from loguru import logger

from notion_importer.application.dto.import_dto import ReconciliationContext
from notion_importer.application.services.property_mapper import map_properties
from notion_importer.application.use_cases.reconciliation_use_cases import (
    ReconciliationResult,
    ReconciliationUseCase,
)
from notion_importer.cli import prompts
from notion_importer.core.config import Settings
from notion_importer.core.logging_setup import print_banner, setup_logging
from notion_importer.domain.entities.mapping import SourceRecord
from notion_importer.domain.entities.property_types import DuplicatePolicy
from notion_importer.infrastructure.external.notion import build_from_settings
from notion_importer.infrastructure.sources.excel_source import ExcelSource
from notion_importer.infrastructure.sources.mongo_source import MONGO_ID_FIELD, MongoSource, rename_id_field
from notion_importer.shared.exceptions.base import AppException
from notion_importer.shared.exceptions.domain import ValidationException


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion-import",
        description="Importa registros de Excel o MongoDB a una base de datos de Notion.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--database-id", help="ID de la base de datos de Notion.")
    sub = parser.add_subparsers(dest="source", required=True)

    excel = sub.add_parser("excel", parents=[common], help="Importar una hoja de un archivo .xlsx")
    excel.add_argument("--file", help="Ruta del archivo (la extensión .xlsx es opcional).")
    excel.add_argument("--sheet", help="Nombre de la hoja.")

    mongo = sub.add_parser("mongo", parents=[common], help="Importar una colección de MongoDB")
    mongo.add_argument("--database", help="Base de datos de Mongo.")
    mongo.add_argument("--collection", help="Colección de Mongo.")
    mongo.add_argument("--id-field", help='Nombre con el que se exporta "_id".')

    return parser


def load_excel(args: argparse.Namespace) -> tuple[list[str], list[SourceRecord]]:
    file_name = args.file or prompts.ask("\nNombre del archivo XLSX (sin extensión)")
    source = ExcelSource(file_name)

    sheet = args.sheet
    if not sheet:
        sheets = source.list_sheets()
        if not sheets:
            logger.error("No se encontraron hojas en el archivo XLSX.")
            return [], []
        sheet = prompts.choose_from_list(
            "\nHojas disponibles en el archivo Excel:", sheets, "Seleccione el número de la hoja"
        )

    headers, records = source.read(sheet)
    if records:
        logger.success(f'Se encontraron {len(records)} filas en la hoja "{sheet}".')
    return headers, records


def load_mongo(args: argparse.Namespace, settings: Settings) -> tuple[list[str], list[SourceRecord]]:
    with MongoSource(settings.MONGO_URI) as source:
        database = args.database or prompts.choose_from_list(
            "Bases de datos disponibles en Mongo:",
            source.list_databases(),
            "Seleccione el número de la base de datos",
        )
        collection = args.collection
        if not collection:
            collections = source.list_collections(database)
            if not collections:
                logger.error(f'No se encontraron colecciones en "{database}".')
                return [], []
            collection = prompts.choose_from_list(
                "\nColecciones disponibles:", collections, "Ingrese el número de la colección que desea usar"
            )
        headers, records = source.read(database, collection)

    if MONGO_ID_FIELD in headers:
        new_name = args.id_field or prompts.prompt_id_field_name()
        headers = rename_id_field(headers, records, new_name)
    if records:
        logger.success(f'Se encontraron {len(records)} documentos en "{database}.{collection}".')
    return headers, records


def collect_context(
    headers: list[str],
    destination_schema: dict[str, str],
    database_id: str,
    settings: Settings,
) -> ReconciliationContext:
    """
    Arma el contexto de la corrida con las respuestas del usuario.

    Los renombres se validan acá: si dos campos terminan con el mismo nombre
    se vuelve a preguntar.
    """
    title_field = prompts.prompt_title_field(headers)

    policy = prompts.prompt_duplicate_policy()
    key_fields: list[str] = []
    if policy is not DuplicatePolicy.NONE:
        key_fields = prompts.prompt_key_fields(headers)
        if not key_fields:
            logger.warning("No se especificaron campos válidos para duplicados. Se ignorará la detección.")
            policy = DuplicatePolicy.NONE

    customize = prompts.prompt_mapping_mode()
    overrides = {}
    while customize:
        overrides = prompts.prompt_overrides(headers, destination_schema, title_field)
        try:
            map_properties(headers, destination_schema, title_field, customize=True, overrides=overrides)
            break
        except ValidationException as e:
            logger.warning(f"{e.message}. Intente nuevamente.")

    return ReconciliationContext(
        database_id=database_id,
        title_field=title_field,
        policy=policy,
        key_fields=key_fields,
        customize=customize,
        overrides=overrides,
        progress_every=settings.PROGRESS_EVERY,
    )


def print_summary(result: ReconciliationResult) -> None:
    click.echo("")
    click.echo(click.style("Resumen de la importación", bold=True))
    click.echo(f"  Creados:      {result.created}")
    click.echo(f"  Actualizados: {result.updated}")
    click.echo(f"  Omitidos:     {result.skipped}")
    click.echo(f"  Fallidos:     {result.failed}")
    if result.new_properties:
        click.echo(f"  Propiedades nuevas: {', '.join(sorted(result.new_properties))}")
    for failed in result.failed_records:
        click.echo(f"    - {failed.error.details.get('record')}: {failed.error.message}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(override=False)
    args = build_parser().parse_args(argv)

    settings = Settings()
    setup_logging(settings)
    print_banner(settings, "Excel" if args.source == "excel" else "MongoDB")

    try:
        token = prompts.prompt_api_key(settings.NOTION_API_KEY)
        use_case = ReconciliationUseCase(build_from_settings(settings, token=token))
        logger.info("Cliente de Notion inicializado.")

        database_id = args.database_id or prompts.prompt_database_id()

        if args.source == "excel":
            headers, records = load_excel(args)
        else:
            headers, records = load_mongo(args, settings)

        if not headers:
            logger.error("No se encontraron encabezados en la fuente seleccionada.")
            return 1
        if not records:
            logger.error("No se encontraron datos en la fuente seleccionada.")
            return 1

        schema = use_case.read_schema(database_id)
        context = collect_context(headers, schema, database_id, settings)
        result = use_case.run(records, headers, context)
    except AppException as e:
        logger.error(f"Error general en la ejecución: {e.message}")
        if e.__cause__ is not None:
            logger.debug(f"Causa: {e.__cause__!r}")
        return 1

    print_summary(result)
    logger.success("Proceso completado con éxito.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
