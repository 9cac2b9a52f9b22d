"""
Preguntas interactivas del importador (click).

Cada función devuelve un valor ya validado: ante una respuesta inválida se
avisa y se vuelve a preguntar. Las funciones parse_* son puras y no leen
de la consola.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

import click
from loguru import logger

from notion_importer.application.services.property_mapper import default_property_type
from notion_importer.domain.entities.mapping import PropertyOverride
from notion_importer.domain.entities.property_types import DuplicatePolicy, PropertyType

INVALID_CHOICE_MSG = "Selección inválida. Intente nuevamente."

# Orden de los menús numerados
DUPLICATE_OPTIONS: dict[str, DuplicatePolicy] = {
    "1": DuplicatePolicy.SKIP,
    "2": DuplicatePolicy.UPDATE_NEW_ONLY,
    "3": DuplicatePolicy.NONE,
}
MAPPING_OPTIONS: dict[str, bool] = {"1": False, "2": True}
SELECTABLE_TYPES: list[PropertyType] = list(PropertyType)


def parse_choice(answer: str, count: int) -> Optional[int]:
    """Índice (0-based) de una respuesta "1".."count", o None si no es válida."""
    try:
        idx = int(answer.strip()) - 1
    except ValueError:
        return None
    if 0 <= idx < count:
        return idx
    return None


def parse_key_fields(answer: str, headers: Sequence[str]) -> list[str]:
    """Campos separados por coma, recortados y filtrados a los headers conocidos."""
    return [f.strip() for f in answer.split(",") if f.strip() and f.strip() in headers]


def ask(text: str, *, required: bool = True, hide_input: bool = False) -> str:
    """Pregunta libre. Si no es obligatoria, Enter devuelve ""."""
    if required:
        return click.prompt(text, hide_input=hide_input).strip()
    return click.prompt(text, default="", show_default=False, hide_input=hide_input).strip()


def choose_from_list(title: str, options: Sequence[str], prompt: str) -> str:
    """Muestra un menú numerado y devuelve la opción elegida."""
    click.echo(click.style(title, bold=True))
    for i, option in enumerate(options, start=1):
        click.echo(f"{i}. {option}")
    while True:
        idx = parse_choice(ask(prompt, required=False), len(options))
        if idx is not None:
            return options[idx]
        logger.warning(INVALID_CHOICE_MSG)


def _choose_option(prompt: str, valid: Sequence[str]) -> str:
    while True:
        answer = ask(prompt, required=False)
        if answer in valid:
            return answer
        logger.warning("Opción inválida. Intente nuevamente.")


def prompt_api_key(current: str) -> str:
    if current:
        return current
    return ask("Ingrese su Notion API Key (secret_xxx)", hide_input=True)


def prompt_database_id() -> str:
    return ask("ID de la base de datos de Notion")


def prompt_title_field(headers: Sequence[str]) -> str:
    return choose_from_list(
        "\nCampos disponibles para usar como propiedad title en Notion:",
        headers,
        "Seleccione el número del campo que será title",
    )


def prompt_duplicate_policy() -> DuplicatePolicy:
    click.echo(click.style(
        "\n¿Hay algún campo que quieras tener en cuenta para detectar duplicados?", bold=True
    ))
    click.echo("1. Sí, chequear duplicados y omitirlos.")
    click.echo("2. Sí, chequear duplicados y actualizar/agregar los campos faltantes.")
    click.echo("3. No, simplemente agregar todos los registros.")
    return DUPLICATE_OPTIONS[_choose_option("Selecciona una opción (1, 2 o 3)", list(DUPLICATE_OPTIONS))]


def prompt_key_fields(headers: Sequence[str]) -> list[str]:
    """
    Campos clave para duplicados.

    Los nombres que no están en la fuente se descartan; una lista vacía hace
    que la corrida ignore la detección.
    """
    answer = ask(
        "\nIngresa el/los campos que se usarán para chequear duplicados (separados por coma)",
        required=False,
    )
    return parse_key_fields(answer, headers)


def prompt_mapping_mode() -> bool:
    """True si el usuario quiere personalizar nombres/tipos."""
    click.echo(click.style("\nOpciones para mapeo de propiedades en Notion:", bold=True))
    click.echo("1. Mantener nombres y tipos detectados")
    click.echo("2. Personalizar nombres y/o tipos en Notion")
    return MAPPING_OPTIONS[_choose_option("Selecciona una opción (1 o 2)", list(MAPPING_OPTIONS))]


def prompt_overrides(
    headers: Sequence[str],
    destination_schema: Mapping[str, str],
    title_field: str,
) -> dict[str, PropertyOverride]:
    """Pregunta renombre y cambio de tipo para cada header."""
    overrides: dict[str, PropertyOverride] = {}
    for header in headers:
        new_name = ask(f'Propiedad "{header}": ¿Cambiar nombre? (Enter para mantener)', required=False)
        prop_name = new_name or header
        current = default_property_type(header, destination_schema, title_field)
        click.echo(f'Tipo actual para "{prop_name}": "{current.value}"')

        new_type: Optional[PropertyType] = None
        if click.confirm("¿Cambiar tipo?", default=False):
            chosen = choose_from_list(
                "Tipos disponibles:",
                [t.value for t in SELECTABLE_TYPES],
                f'Selecciona tipo para "{prop_name}"',
            )
            new_type = PropertyType(chosen)

        if new_name or new_type is not None:
            overrides[header] = PropertyOverride(name=new_name or None, type=new_type)
    return overrides


def prompt_id_field_name() -> str:
    return ask('\nIngrese el nombre para exportar el campo "_id"')
