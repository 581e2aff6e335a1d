"""
Almacenamiento de documentos en archivos JSON.

Cada colección es un array JSON en su propio archivo dentro de
`data_dir`. Todas las operaciones leen el archivo completo, lo modifican
en memoria y lo reescriben entero.

Las escrituras de una misma colección se serializan con un lock async
por colección (ver `serialize_writes`). Las lecturas no toman lock, así
que una consulta que lee varias colecciones puede ver un estado
intermedio si otra tarea escribe en el medio. Tampoco hay protección
entre procesos: el store asume un único proceso escritor.
"""

import asyncio
import json
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Optional, TypeVar

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from swotlink.config import get_settings
from swotlink.database.predicates import Predicate, select
from swotlink.database.seeds import SEEDS
from swotlink.exceptions import UnknownCollectionError

logger = structlog.get_logger()

T = TypeVar("T")

# Colección -> campo identificador. El archivo es siempre <colección>.json
COLLECTIONS: dict[str, str] = {
    "users": "user_id",
    "startup_profiles": "profile_id",
    "investor_profiles": "profile_id",
    "industries": "industry_id",
    "funding_stages": "stage_id",
    "saved_matches": "saved_id",
    "pitch_videos": "id",
    "video_views": "id",
    "video_comments": "id",
    "messages": "id",
    "conversations": "id",
    "deal_rooms": "id",
    "deal_room_files": "id",
    "file_permissions": "id",
    "notifications": "id",
    "profile_views": "id",
    "engagement_metrics": "id",
    "badges": "badge_id",
    "user_badges": "id",
    "user_stats": "id",
    "notification_preferences": "id",
    "notification_queue": "id",
    "admin_users": "id",
    "kyc_documents": "id",
    "user_verifications": "id",
    "admin_action_logs": "id",
    "user_reports": "id",
    "user_suspensions": "id",
    "forum_categories": "category_id",
    "forum_posts": "id",
    "forum_replies": "id",
    "forum_post_likes": "id",
    "forum_reply_likes": "id",
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def next_id(records: list[dict], id_field: str) -> int:
    """
    Próximo ID: max(ids existentes) + 1, o 1 si la colección está vacía.

    Si se borra el registro con el ID máximo, el próximo insert
    reutiliza ese ID.
    """
    ids = [r.get(id_field) or 0 for r in records]
    return max(ids, default=0) + 1


class DocumentStore:
    """
    Store de colecciones JSON con una API mínima estilo base relacional.

    Los errores de lectura devuelven colecciones vacías y los errores de
    escritura se reportan como valores de retorno; nunca se propagan.
    """

    def __init__(
        self,
        data_dir: Optional[Path | str] = None,
        serialize_writes: Optional[bool] = None,
        write_retry_attempts: Optional[int] = None,
    ):
        settings = get_settings()
        self.data_dir = Path(data_dir) if data_dir else Path(settings.data_dir)
        self.serialize_writes = (
            settings.serialize_writes if serialize_writes is None else serialize_writes
        )
        self.write_retry_attempts = write_retry_attempts or settings.write_retry_attempts
        self._locks: dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # Registro de colecciones
    # ------------------------------------------------------------------

    def path_for(self, collection: str) -> Path:
        """Ruta del archivo de una colección registrada."""
        if collection not in COLLECTIONS:
            raise UnknownCollectionError(collection)
        return self.data_dir / f"{collection}.json"

    @staticmethod
    def id_field_for(collection: str) -> str:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise UnknownCollectionError(collection) from None

    # ------------------------------------------------------------------
    # Inicialización
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Crea el directorio de datos y los archivos faltantes.

        Las colecciones con datos iniciales (industrias, etapas, badges,
        categorías del foro) se siembran solo si su archivo es nuevo.
        Es idempotente. Si el directorio no se puede crear, propaga.
        """
        try:
            created = await asyncio.to_thread(self._initialize_files)
        except OSError as e:
            logger.error(
                "Error inicializando almacenamiento",
                data_dir=str(self.data_dir),
                error=str(e),
            )
            raise

        logger.info(
            "Almacenamiento inicializado",
            data_dir=str(self.data_dir),
            created=len(created),
        )

    def _initialize_files(self) -> list[str]:
        self.data_dir.mkdir(parents=True, exist_ok=True)

        created = []
        for collection in COLLECTIONS:
            path = self.path_for(collection)
            initial = SEEDS.get(collection, [])
            try:
                # "x" falla si el archivo ya existe: nunca se resiembra
                with path.open("x", encoding="utf-8") as fh:
                    fh.write(json.dumps(initial, indent=2, ensure_ascii=False))
            except FileExistsError:
                continue
            created.append(collection)
            if initial:
                logger.debug("Colección sembrada", collection=collection, records=len(initial))
        return created

    # ------------------------------------------------------------------
    # Lectura / escritura cruda
    # ------------------------------------------------------------------

    async def read_all(self, collection: str) -> list[dict]:
        """
        Lee la colección completa.

        Ante un archivo ilegible o corrupto devuelve [] y loguea: una
        colección rota degrada la funcionalidad pero no tira el proceso.
        """
        path = self.path_for(collection)
        try:
            data = await asyncio.to_thread(self._read_file, path)
        except (OSError, ValueError) as e:
            logger.error("Error leyendo colección", collection=collection, error=str(e))
            return []

        if not isinstance(data, list):
            logger.error(
                "Colección corrupta: se esperaba un array",
                collection=collection,
                type=type(data).__name__,
            )
            return []
        return data

    async def get_all(self, collection: str) -> list[dict]:
        """Alias de read_all para cargas masivas."""
        return await self.read_all(collection)

    async def write_all(self, collection: str, records: list[dict]) -> bool:
        """
        Sobrescribe la colección completa.

        Returns:
            True si se persistió, False si falló (no lanza excepción)
        """
        path = self.path_for(collection)
        try:
            await asyncio.to_thread(self._write_file, path, records)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error escribiendo colección", collection=collection, error=str(e))
            return False
        return True

    @staticmethod
    def _read_file(path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    def _write_file(self, path: Path, records: list[dict]) -> None:
        # Serializar antes de reintentar: un TypeError no es transitorio
        payload = json.dumps(records, indent=2, ensure_ascii=False)
        tmp = path.with_suffix(".json.tmp")

        for attempt in Retrying(
            stop=stop_after_attempt(self.write_retry_attempts),
            wait=wait_exponential(multiplier=0.05, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        ):
            with attempt:
                tmp.write_text(payload, encoding="utf-8")
                tmp.replace(path)

    @asynccontextmanager
    async def _writer(self, collection: str) -> AsyncIterator[None]:
        """Sección crítica de lectura-modificación-escritura de una colección."""
        if not self.serialize_writes:
            yield
            return

        lock = self._locks.setdefault(collection, asyncio.Lock())
        async with lock:
            yield

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------

    async def find_one(self, collection: str, predicate: Predicate) -> Optional[dict]:
        """Primer registro que cumple el predicado, o None."""
        records = await self.read_all(collection)
        return next((r for r in records if predicate.matches(r)), None)

    async def find_many(
        self, collection: str, predicate: Optional[Predicate] = None
    ) -> list[dict]:
        """Todos los registros que cumplen el predicado (todos si no hay)."""
        records = await self.read_all(collection)
        return select(records, predicate)

    async def count(self, collection: str, predicate: Optional[Predicate] = None) -> int:
        return len(await self.find_many(collection, predicate))

    async def query(self, collection: str, fn: Callable[[list[dict]], T]) -> T:
        """
        Escape hatch para operaciones que el API de predicados no cubre
        (ordenar, agrupar, agregar). Recibe la colección completa.
        """
        records = await self.read_all(collection)
        return fn(records)

    # ------------------------------------------------------------------
    # Mutaciones
    # ------------------------------------------------------------------

    async def insert(
        self,
        collection: str,
        fields: dict,
        id_field: Optional[str] = None,
    ) -> Optional[dict]:
        """
        Inserta un registro con ID autoincremental y created_at.

        Returns:
            El registro insertado, o None si no se pudo persistir
        """
        id_field = id_field or self.id_field_for(collection)

        async with self._writer(collection):
            records = await self.read_all(collection)
            new_id = next_id(records, id_field)
            record = {
                id_field: new_id,
                **{k: v for k, v in fields.items() if k != id_field},
                "created_at": _now(),
            }
            records.append(record)

            if not await self.write_all(collection, records):
                return None

        logger.debug("Registro insertado", collection=collection, **{id_field: new_id})
        return record

    async def update(self, collection: str, predicate: Predicate, patch: dict) -> bool:
        """
        Mergea `patch` (más updated_at) sobre cada registro que matchea.
        Los campos que no están en el patch se conservan.

        Returns:
            True si hubo registros actualizados y se persistieron
        """
        async with self._writer(collection):
            records = await self.read_all(collection)
            now = _now()
            matched = 0
            for index, record in enumerate(records):
                if predicate.matches(record):
                    records[index] = {**record, **patch, "updated_at": now}
                    matched += 1

            if not matched:
                return False

            if not await self.write_all(collection, records):
                return False

        logger.debug("Registros actualizados", collection=collection, updated=matched)
        return True

    async def upsert(
        self,
        collection: str,
        predicate: Predicate,
        fields: dict,
        patch: Optional[dict] = None,
        id_field: Optional[str] = None,
    ) -> Optional[dict]:
        """
        Actualiza el primer registro que matchea o inserta uno nuevo, todo
        dentro de la misma sección crítica.

        Args:
            collection: Nombre de la colección
            predicate: Selector del registro existente
            fields: Campos del registro nuevo
            patch: Campos a mergear si ya existe (por defecto, `fields`)
            id_field: Campo ID (por defecto, el de la colección)

        Returns:
            El registro guardado, o None si no se pudo persistir
        """
        id_field = id_field or self.id_field_for(collection)
        patch = fields if patch is None else patch

        async with self._writer(collection):
            records = await self.read_all(collection)
            index = next(
                (i for i, r in enumerate(records) if predicate.matches(r)), None
            )
            if index is None:
                record = {
                    id_field: next_id(records, id_field),
                    **{k: v for k, v in fields.items() if k != id_field},
                    "created_at": _now(),
                }
                records.append(record)
            else:
                record = {
                    **records[index],
                    **{k: v for k, v in patch.items() if k != id_field},
                    "updated_at": _now(),
                }
                records[index] = record

            if not await self.write_all(collection, records):
                return None

        logger.debug(
            "Registro guardado",
            collection=collection,
            created=index is None,
            **{id_field: record[id_field]},
        )
        return record

    async def delete(self, collection: str, predicate: Predicate) -> int:
        """
        Borra los registros que matchean.

        Returns:
            Cantidad de registros borrados (0 si no hubo o si falló la escritura)
        """
        async with self._writer(collection):
            records = await self.read_all(collection)
            kept = [r for r in records if not predicate.matches(r)]
            removed = len(records) - len(kept)

            if not removed:
                return 0

            if not await self.write_all(collection, kept):
                return 0

        logger.info("Registros borrados", collection=collection, deleted=removed)
        return removed


@lru_cache
def get_document_store() -> DocumentStore:
    """
    Obtiene el store del proceso (singleton cacheado).

    Returns:
        DocumentStore apuntando a settings.data_dir
    """
    store = DocumentStore()
    logger.info("Document store creado", data_dir=str(store.data_dir))
    return store
