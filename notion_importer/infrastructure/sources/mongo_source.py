"""
Fuente de documentos: colecciones de MongoDB (pymongo).

El cliente se inyecta para poder testear sin servidor; por defecto se
crea un MongoClient a partir de la URI.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from loguru import logger
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from notion_importer.domain.entities.mapping import SourceRecord
from notion_importer.shared.exceptions.domain import SourceReadError

MONGO_ID_FIELD = "_id"


def collect_headers(documents: Iterable[SourceRecord]) -> list[str]:
    """Unión de las claves de todos los documentos, en orden de primera aparición."""
    seen: dict[str, None] = {}
    for doc in documents:
        for key in doc:
            seen.setdefault(key, None)
    return list(seen)


def rename_id_field(
    headers: list[str],
    documents: list[SourceRecord],
    new_name: str,
) -> list[str]:
    """
    Renombra `_id` en headers y documentos.

    El nuevo nombre pasa al final de los headers. Si ya existía un campo con
    ese nombre, su valor se reemplaza por el de `_id`.

    Returns:
        list[str]: headers actualizados
    """
    if MONGO_ID_FIELD not in headers or not new_name or new_name == MONGO_ID_FIELD:
        return headers

    updated = [h for h in headers if h not in (MONGO_ID_FIELD, new_name)]
    updated.append(new_name)
    for doc in documents:
        if MONGO_ID_FIELD in doc:
            doc[new_name] = doc.pop(MONGO_ID_FIELD)
    logger.info(f'Se ha renombrado "{MONGO_ID_FIELD}" a "{new_name}".')
    return updated


class MongoSource:
    """Acceso de solo lectura a bases y colecciones de Mongo."""

    def __init__(self, uri: str, *, client: Optional[Any] = None) -> None:
        self._uri = uri
        if client is not None:
            self._client = client
            return
        try:
            self._client = MongoClient(uri)
        except PyMongoError as e:
            raise SourceReadError(f"URI de Mongo inválida: {e}", source=uri) from e

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "MongoSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def list_databases(self) -> list[str]:
        try:
            return list(self._client.list_database_names())
        except PyMongoError as e:
            raise SourceReadError(
                f"No se pudieron listar las bases de datos de Mongo: {e}",
                source=self._uri,
            ) from e

    def list_collections(self, database: str) -> list[str]:
        try:
            return list(self._client[database].list_collection_names())
        except PyMongoError as e:
            raise SourceReadError(
                f'No se pudieron listar las colecciones de "{database}": {e}',
                source=f"{self._uri}/{database}",
            ) from e

    def read_documents(self, database: str, collection: str) -> list[SourceRecord]:
        """Todos los documentos de la colección, en el orden natural de Mongo."""
        try:
            documents = [dict(doc) for doc in self._client[database][collection].find()]
        except PyMongoError as e:
            raise SourceReadError(
                f'Error al leer los datos de "{database}.{collection}": {e}',
                source=f"{self._uri}/{database}.{collection}",
            ) from e
        logger.debug(f"{database}.{collection}: {len(documents)} documentos")
        return documents

    def read(self, database: str, collection: str) -> tuple[list[str], list[SourceRecord]]:
        documents = self.read_documents(database, collection)
        return collect_headers(documents), documents
