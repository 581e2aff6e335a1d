"""
Repositorios para operaciones CRUD sobre el document store.

Cada repositorio maneja una colección/entidad específica.
"""

from typing import Optional

import structlog

from swotlink.database.file_storage import DocumentStore, get_document_store
from swotlink.database.predicates import where
from swotlink.models import InvestorProfile, SavedMatch, StartupProfile, User

logger = structlog.get_logger()


class BaseRepository:
    """Clase base para repositorios."""

    TABLE: str = ""

    def __init__(self, store: Optional[DocumentStore] = None):
        self._store = store or get_document_store()

    @property
    def store(self) -> DocumentStore:
        return self._store


class UserRepository(BaseRepository):
    """Repositorio para usuarios."""

    TABLE = "users"

    async def create(self, user: User) -> Optional[dict]:
        """
        Crea un nuevo usuario.

        Returns:
            El registro insertado con su user_id, o None si falló la escritura
        """
        record = await self.store.insert(self.TABLE, user.to_db_dict())
        if record:
            logger.info("Usuario creado", user_id=record["user_id"], role=user.role)
        return record

    async def get_by_id(self, user_id: int) -> Optional[dict]:
        """Obtiene un usuario por su ID."""
        return await self.store.find_one(self.TABLE, where(user_id=user_id))

    async def get_active_users(self) -> list[dict]:
        """Obtiene todos los usuarios activos."""
        return await self.store.find_many(self.TABLE, where(is_active=True))

    async def set_active(self, user_id: int, is_active: bool) -> bool:
        """Activa o desactiva un usuario."""
        updated = await self.store.update(
            self.TABLE, where(user_id=user_id), {"is_active": is_active}
        )
        if updated:
            logger.info("Estado de usuario actualizado", user_id=user_id, is_active=is_active)
        return updated

    async def delete(self, user_id: int) -> int:
        """
        Borra la cuenta junto con sus perfiles y matches guardados.

        Returns:
            Cantidad de usuarios borrados (0 o 1)
        """
        for table in (StartupProfileRepository.TABLE, InvestorProfileRepository.TABLE):
            await self.store.delete(table, where(user_id=user_id))
        await self.store.delete(SavedMatchRepository.TABLE, where(user_id=user_id))
        await self.store.delete(SavedMatchRepository.TABLE, where(target_user_id=user_id))

        return await self.store.delete(self.TABLE, where(user_id=user_id))


class ProfileRepository(BaseRepository):
    """Base común de perfiles: relación 1:1 con users por user_id."""

    ID_FIELD = "profile_id"

    async def get_by_user_id(self, user_id: int) -> Optional[dict]:
        """Obtiene el perfil de un usuario."""
        return await self.store.find_one(self.TABLE, where(user_id=user_id))

    async def get_by_id(self, profile_id: int) -> Optional[dict]:
        """Obtiene un perfil por su ID."""
        return await self.store.find_one(self.TABLE, where(profile_id=profile_id))

    async def _save(self, user_id: int, data: dict) -> Optional[dict]:
        record = await self.store.upsert(
            self.TABLE, where(user_id=user_id), data, id_field=self.ID_FIELD
        )
        if record:
            logger.info("Perfil guardado", table=self.TABLE, user_id=user_id)
        return record

    async def delete_by_user_id(self, user_id: int) -> int:
        """Borra el perfil de un usuario."""
        return await self.store.delete(self.TABLE, where(user_id=user_id))


class StartupProfileRepository(ProfileRepository):
    """Repositorio para perfiles de startups."""

    TABLE = "startup_profiles"

    async def save(self, profile: StartupProfile) -> Optional[dict]:
        """
        Crea el perfil en el primer guardado y lo actualiza en los siguientes.

        Returns:
            El registro guardado, o None si falló la escritura
        """
        return await self._save(profile.user_id, profile.to_db_dict())


class InvestorProfileRepository(ProfileRepository):
    """Repositorio para perfiles de inversores."""

    TABLE = "investor_profiles"

    async def save(self, profile: InvestorProfile) -> Optional[dict]:
        """
        Crea el perfil en el primer guardado y lo actualiza en los siguientes.

        Returns:
            El registro guardado, o None si falló la escritura
        """
        return await self._save(profile.user_id, profile.to_db_dict())


class LookupRepository(BaseRepository):
    """Repositorio de solo lectura para industrias y etapas de financiamiento."""

    INDUSTRIES = "industries"
    FUNDING_STAGES = "funding_stages"

    async def industries(self) -> list[dict]:
        return await self.store.get_all(self.INDUSTRIES)

    async def funding_stages(self) -> list[dict]:
        return await self.store.get_all(self.FUNDING_STAGES)

    async def industry_names(self) -> dict[int, str]:
        """Mapa industry_id -> industry_name."""
        return {
            i["industry_id"]: i.get("industry_name")
            for i in await self.industries()
            if i.get("industry_id") is not None
        }

    async def stage_names(self) -> dict[int, str]:
        """Mapa stage_id -> stage_name."""
        return {
            s["stage_id"]: s.get("stage_name")
            for s in await self.funding_stages()
            if s.get("stage_id") is not None
        }


class SavedMatchRepository(BaseRepository):
    """Repositorio para candidatos guardados."""

    TABLE = "saved_matches"

    async def save(
        self,
        user_id: int,
        target_user_id: int,
        target_type: str,
        notes: Optional[str] = None,
    ) -> Optional[dict]:
        """
        Guarda un candidato. Si ya estaba guardado, actualiza las notas.

        Returns:
            El registro guardado, o None si falló la escritura
        """
        saved = SavedMatch(
            user_id=user_id,
            target_user_id=target_user_id,
            target_type=target_type,
            notes=notes,
        )
        record = await self.store.upsert(
            self.TABLE,
            where(user_id=user_id, target_user_id=target_user_id),
            saved.to_db_dict(),
            patch={"notes": notes},
        )
        if record:
            logger.info(
                "Match guardado",
                user_id=user_id,
                target_user_id=target_user_id,
                type=target_type,
            )
        return record

    async def get(self, user_id: int, target_user_id: int) -> Optional[dict]:
        return await self.store.find_one(
            self.TABLE, where(user_id=user_id, target_user_id=target_user_id)
        )

    async def remove(self, user_id: int, target_user_id: int) -> int:
        """Quita un candidato de los guardados."""
        return await self.store.delete(
            self.TABLE, where(user_id=user_id, target_user_id=target_user_id)
        )

    async def is_saved(self, user_id: int, target_user_id: int) -> bool:
        """Verifica si el candidato está guardado."""
        return await self.get(user_id, target_user_id) is not None

    async def list_for_user(self, user_id: int) -> list[dict]:
        """Guardados de un usuario, los más recientes primero."""

        def newest_first(records: list[dict]) -> list[dict]:
            mine = [r for r in records if r.get("user_id") == user_id]
            return sorted(
                mine,
                key=lambda r: r.get("saved_at") or r.get("created_at") or "",
                reverse=True,
            )

        return await self.store.query(self.TABLE, newest_first)
