"""
Utilidades puras para convertir valores de la fuente a texto.

La misma conversión se usa para armar payloads y para comparar claves
de duplicados, de modo que "5" en Excel y 5 en Notion coincidan.
"""
from __future__ import annotations

import json
from datetime import date, datetime, time
from typing import Any


def to_text(value: Any) -> str:
    """
    Convierte un valor escalar (o casi escalar) a string.

    Reglas:
    - None -> ""
    - bool -> "true" / "false"
    - float entero -> sin ".0" (5.0 -> "5")
    - datetime a medianoche sin zona -> solo la fecha (YYYY-MM-DD)
    - date / datetime / time -> ISO 8601
    - list / tuple -> elementos unidos por ","
    - dict -> JSON
    - cualquier otro (ObjectId, Decimal, ...) -> str(value)
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None and value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def is_blank(value: Any) -> bool:
    """True si el valor es None o un string vacío."""
    return value is None or value == ""


def split_tags(text: str) -> list[str]:
    """
    Separa un string por comas y recorta cada token.

    "a, b , c" -> ["a", "b", "c"]. Los tokens vacíos se descartan.
    """
    return [token.strip() for token in text.split(",") if token.strip()]


def chunk_text(text: str, size: int) -> list[str]:
    """Divide un texto en segmentos de a lo sumo `size` caracteres."""
    if not text:
        return []
    return [text[i:i + size] for i in range(0, len(text), size)]
