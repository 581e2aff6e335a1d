"""
Candidatos guardados (bookmarks).

Un inversor guarda startups y una startup guarda inversores. El listado
se arma contra los datos vivos: si el usuario o el perfil guardado ya no
existe, el bookmark se omite.
"""

import asyncio
from typing import Optional

import structlog

from swotlink.config import ROLE_INVESTOR
from swotlink.database import (
    DocumentStore,
    InvestorProfileRepository,
    LookupRepository,
    SavedMatchRepository,
    StartupProfileRepository,
    UserRepository,
    get_document_store,
)
from swotlink.matching.scoring import parse_preferences

logger = structlog.get_logger()


class SavedMatchService:
    """Guarda, quita y lista candidatos guardados."""

    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or get_document_store()
        self.saved_repo = SavedMatchRepository(self.store)
        self.user_repo = UserRepository(self.store)
        self.startup_repo = StartupProfileRepository(self.store)
        self.investor_repo = InvestorProfileRepository(self.store)
        self.lookup_repo = LookupRepository(self.store)

    async def save(
        self,
        user_id: int,
        target_user_id: int,
        target_type: str,
        notes: Optional[str] = None,
    ) -> Optional[dict]:
        return await self.saved_repo.save(user_id, target_user_id, target_type, notes)

    async def remove(self, user_id: int, target_user_id: int) -> int:
        return await self.saved_repo.remove(user_id, target_user_id)

    async def is_saved(self, user_id: int, target_user_id: int) -> bool:
        return await self.saved_repo.is_saved(user_id, target_user_id)

    async def list_saved(self, user_id: int, role: str) -> list[dict]:
        """
        Lista los guardados de un usuario con los datos del perfil guardado.

        Args:
            user_id: Usuario dueño de los bookmarks
            role: Rol del usuario. Un inversor ve startups; el resto, inversores

        Returns:
            Lista de dicts, los más recientes primero
        """
        saved, users = await asyncio.gather(
            self.saved_repo.list_for_user(user_id),
            self.store.get_all(UserRepository.TABLE),
        )
        users_by_id = {u.get("user_id"): u for u in users}

        if role == ROLE_INVESTOR:
            profiles, industry_names, stage_names = await asyncio.gather(
                self.store.get_all(StartupProfileRepository.TABLE),
                self.lookup_repo.industry_names(),
                self.lookup_repo.stage_names(),
            )
        else:
            profiles = await self.store.get_all(InvestorProfileRepository.TABLE)
        profiles_by_user: dict = {}
        for profile in profiles:
            profiles_by_user.setdefault(profile.get("user_id"), profile)

        result = []
        for match in saved:
            target_id = match.get("target_user_id")
            user = users_by_id.get(target_id)
            profile = profiles_by_user.get(target_id)
            if not user or not profile:
                continue

            entry = {
                **profile,
                "saved_id": match["saved_id"],
                "notes": match.get("notes"),
                "saved_at": match.get("saved_at") or match.get("created_at"),
                "first_name": user.get("first_name"),
                "last_name": user.get("last_name"),
            }
            if role == ROLE_INVESTOR:
                entry["industry_name"] = industry_names.get(profile.get("industry_id"))
                entry["stage_name"] = stage_names.get(profile.get("funding_stage_id"))
            else:
                entry["industries"] = sorted(
                    parse_preferences(profile.get("industries"), "industry_id")
                )
                entry["stages"] = sorted(
                    parse_preferences(profile.get("funding_stages"), "stage_id")
                )
            result.append(entry)

        skipped = len(saved) - len(result)
        if skipped:
            logger.info("Guardados huérfanos omitidos", user_id=user_id, skipped=skipped)
        return result
