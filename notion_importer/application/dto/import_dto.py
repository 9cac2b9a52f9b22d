"""
DTOs para una corrida de importación.
Define el contexto explícito que recibe el orquestador.
"""
from typing import Dict, List

from pydantic import BaseModel, Field

from notion_importer.domain.entities.mapping import PropertyOverride
from notion_importer.domain.entities.property_types import DuplicatePolicy


class ReconciliationContext(BaseModel):
    """
    Parámetros de una corrida: destino, campo title y política de duplicados.

    Se construye a partir de las respuestas del usuario (o de argumentos)
    y no se modifica durante la corrida.
    """

    database_id: str = Field(..., min_length=1, description="ID de la base de datos de Notion")
    title_field: str = Field(..., min_length=1, description="Campo de la fuente que será title")
    policy: DuplicatePolicy = Field(
        default=DuplicatePolicy.NONE,
        description="Qué hacer con registros cuya clave ya existe"
    )
    key_fields: List[str] = Field(
        default_factory=list,
        description="Campos de la fuente para detectar duplicados, en orden de prioridad"
    )
    customize: bool = Field(default=False, description="Aplicar renombres/cambios de tipo")
    overrides: Dict[str, PropertyOverride] = Field(
        default_factory=dict,
        description="Personalizaciones por campo de la fuente"
    )
    progress_every: int = Field(default=50, ge=1, description="Cada cuántos registros informar avance")

    class Config:
        frozen = True
