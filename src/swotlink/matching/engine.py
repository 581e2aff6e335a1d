"""
Motor de matching entre startups e inversores.

Implementa:
- Filtros Hard: descartan candidatos fuera de las preferencias o de los
  filtros de UI
- Score: compatibilidad 0-100 (ver scoring.py) para ordenar los que quedan
- Estadísticas de matches para el dashboard

Cada llamada relee las colecciones del store; no hay cache. Las lecturas
no son atómicas entre sí.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import structlog

from swotlink.config import ROLE_INVESTOR, ROLE_STARTUP, get_settings
from swotlink.database import (
    DocumentStore,
    InvestorProfileRepository,
    LookupRepository,
    StartupProfileRepository,
    UserRepository,
    get_document_store,
)
from swotlink.exceptions import ProfileNotFoundError
from swotlink.matching.scoring import parse_preferences, score, to_number
from swotlink.models import InvestorFilters, StartupFilters

logger = structlog.get_logger()

INDUSTRY_KEY = "industry_id"
STAGE_KEY = "stage_id"


@dataclass
class MatchStats:
    """Resumen de matches para el dashboard."""

    total_matches: int = 0
    top_matches: int = 0  # score >= top_match_threshold
    good_matches: int = 0  # el resto


def _is_active(user: Optional[dict]) -> bool:
    return bool(user) and user.get("is_active") is True


def _owner_fields(user: dict) -> dict:
    return {
        "first_name": user.get("first_name") or "",
        "last_name": user.get("last_name") or "",
        "email": user.get("email") or "",
        "is_verified": bool(user.get("is_verified")),
    }


def _below(value, bound) -> bool:
    """value < bound, solo si ambos son numéricos."""
    value, bound = to_number(value), to_number(bound)
    return value is not None and bound is not None and value < bound


def _above(value, bound) -> bool:
    value, bound = to_number(value), to_number(bound)
    return value is not None and bound is not None and value > bound


def _contains(haystack: Optional[str], needle: str) -> bool:
    return bool(haystack) and needle.lower() in str(haystack).lower()


def _matches_search(needle: str, *fields: Optional[str]) -> bool:
    return any(_contains(field, needle) for field in fields)


def preferences_match(
    startup: dict,
    investor_industries: set[int],
    investor_stages: set[int],
    ignore_industry: bool = False,
    ignore_stage: bool = False,
) -> bool:
    """
    Filtro hard de preferencias.

    Solo excluye cuando el inversor tiene preferencias y la startup tiene
    el dato: sin preferencia (o sin industria/etapa) no filtra.
    """
    industry_id = startup.get("industry_id")
    if not ignore_industry and investor_industries and industry_id:
        if industry_id not in investor_industries:
            return False

    stage_id = startup.get("funding_stage_id")
    if not ignore_stage and investor_stages and stage_id:
        if stage_id not in investor_stages:
            return False

    return True


class MatchingEngine:
    """
    Motor de matching con hard filters + score ponderado.

    Flujo (en ambas direcciones):
    1. Cargar el perfil propio (error si no existe)
    2. Cargar en bloque perfiles, usuarios y tablas de lookup
    3. Descartar candidatos inactivos o que no pasan los filtros hard
    4. Calcular score, ordenar descendente y cortar en `limit`
    """

    def __init__(self, store: Optional[DocumentStore] = None):
        self.settings = get_settings()
        self.store = store or get_document_store()
        self.user_repo = UserRepository(self.store)
        self.startup_repo = StartupProfileRepository(self.store)
        self.investor_repo = InvestorProfileRepository(self.store)
        self.lookup_repo = LookupRepository(self.store)

    async def _load_investor(self, user_id: int) -> dict:
        investor = await self.investor_repo.get_by_user_id(user_id)
        if not investor:
            raise ProfileNotFoundError(ROLE_INVESTOR, user_id=user_id)
        return investor

    async def _load_startup(self, user_id: int) -> dict:
        startup = await self.startup_repo.get_by_user_id(user_id)
        if not startup:
            raise ProfileNotFoundError(ROLE_STARTUP, user_id=user_id)
        return startup

    @staticmethod
    def _investor_preferences(investor: dict) -> tuple[set[int], set[int]]:
        return (
            parse_preferences(investor.get("industries"), INDUSTRY_KEY),
            parse_preferences(investor.get("funding_stages"), STAGE_KEY),
        )

    async def matching_startups_for(
        self,
        investor_user_id: int,
        filters: Optional[StartupFilters] = None,
    ) -> list[dict]:
        """
        Startups que matchean con un inversor.

        Args:
            investor_user_id: user_id del inversor
            filters: Filtros hard adicionales (opcional)

        Returns:
            Registros de startup con match_score, datos del usuario y nombres
            de industria/etapa, ordenados por score descendente

        Raises:
            ProfileNotFoundError: Si el inversor no tiene perfil
        """
        filters = filters or StartupFilters()
        investor = await self._load_investor(investor_user_id)
        industries_pref, stages_pref = self._investor_preferences(investor)

        # Carga en bloque para evitar leer un archivo por candidato
        startups, users, industry_names, stage_names = await asyncio.gather(
            self.store.get_all(StartupProfileRepository.TABLE),
            self.store.get_all(UserRepository.TABLE),
            self.lookup_repo.industry_names(),
            self.lookup_repo.stage_names(),
        )
        users_by_id = {u.get("user_id"): u for u in users}

        matches = []
        for startup in startups:
            owner = users_by_id.get(startup.get("user_id"))
            if not _is_active(owner):
                continue
            if not self._passes_startup_filters(
                startup, investor, industries_pref, stages_pref, filters
            ):
                continue

            industry_name = industry_names.get(startup.get("industry_id"))
            stage_name = stage_names.get(startup.get("funding_stage_id"))

            if filters.search and not _matches_search(
                filters.search,
                startup.get("company_name"),
                startup.get("elevator_pitch"),
                startup.get("location"),
                industry_name,
            ):
                continue

            matches.append({
                **startup,
                **_owner_fields(owner),
                "industry_name": industry_name,
                "stage_name": stage_name,
                "match_score": score(startup, investor, industries_pref, stages_pref),
            })

        # sort() es estable: los empates conservan el orden del archivo
        matches.sort(key=lambda m: m["match_score"], reverse=True)

        logger.info(
            "Startups matcheadas",
            investor_user_id=investor_user_id,
            candidates=len(startups),
            matches=len(matches),
        )

        if filters.limit:
            return matches[: filters.limit]
        return matches

    @staticmethod
    def _passes_startup_filters(
        startup: dict,
        investor: dict,
        industries_pref: set[int],
        stages_pref: set[int],
        filters: StartupFilters,
    ) -> bool:
        goal = startup.get("funding_goal")

        # Rango de inversión del inversor
        if not filters.ignore_budget:
            if investor.get("budget_min") and _below(goal, investor["budget_min"]):
                return False
            if investor.get("budget_max") and _above(goal, investor["budget_max"]):
                return False

        if not preferences_match(
            startup,
            industries_pref,
            stages_pref,
            ignore_industry=filters.ignore_industry,
            ignore_stage=filters.ignore_stage,
        ):
            return False

        # Filtros de UI
        if filters.industry_id is not None and startup.get("industry_id") != filters.industry_id:
            return False
        if filters.stage_id is not None and startup.get("funding_stage_id") != filters.stage_id:
            return False
        if filters.min_funding is not None and _below(goal, filters.min_funding):
            return False
        if filters.max_funding is not None and _above(goal, filters.max_funding):
            return False
        if filters.location and startup.get("location"):
            if not _contains(startup["location"], filters.location):
                return False
        if filters.min_team_size is not None and _below(
            startup.get("team_size"), filters.min_team_size
        ):
            return False
        if filters.featured_only and not startup.get("is_featured"):
            return False
        if filters.hot_only and not startup.get("is_hot"):
            return False

        return True

    async def matching_investors_for(
        self,
        startup_user_id: int,
        filters: Optional[InvestorFilters] = None,
    ) -> list[dict]:
        """
        Inversores que matchean con una startup.

        Con `show_all`, los inversores cuyas preferencias no incluyen la
        industria/etapa de la startup se devuelven igual, con
        is_match=False.

        Raises:
            ProfileNotFoundError: Si la startup no tiene perfil
        """
        filters = filters or InvestorFilters()
        startup = await self._load_startup(startup_user_id)

        investors, users = await asyncio.gather(
            self.store.get_all(InvestorProfileRepository.TABLE),
            self.store.get_all(UserRepository.TABLE),
        )
        users_by_id = {u.get("user_id"): u for u in users}
        goal = startup.get("funding_goal")

        matches = []
        for investor in investors:
            owner = users_by_id.get(investor.get("user_id"))
            if not _is_active(owner):
                continue

            # Filtros base
            if goal and investor.get("budget_max") and _below(investor["budget_max"], goal):
                continue
            if filters.investor_type and investor.get("investor_type") != filters.investor_type:
                continue
            if filters.min_budget is not None and _below(investor.get("budget_min"), filters.min_budget):
                continue
            if filters.max_budget is not None and _above(investor.get("budget_max"), filters.max_budget):
                continue
            if filters.location and investor.get("location"):
                if not _contains(investor["location"], filters.location):
                    continue
            if filters.search and not _matches_search(
                filters.search,
                investor.get("investor_name"),
                investor.get("investment_thesis"),
                investor.get("location"),
                investor.get("investor_type"),
            ):
                continue

            industries_pref, stages_pref = self._investor_preferences(investor)
            is_match = preferences_match(
                startup,
                industries_pref,
                stages_pref,
                ignore_industry=filters.ignore_industry,
                ignore_stage=filters.ignore_stage,
            )
            if not is_match and not filters.show_all:
                continue

            matches.append({
                **investor,
                **_owner_fields(owner),
                "industries": sorted(industries_pref),
                "stages": sorted(stages_pref),
                "match_score": score(startup, investor, industries_pref, stages_pref),
                "is_match": is_match,
            })

        matches.sort(key=lambda m: m["match_score"], reverse=True)

        logger.info(
            "Inversores matcheados",
            startup_user_id=startup_user_id,
            candidates=len(investors),
            matches=len(matches),
            show_all=filters.show_all,
        )

        if filters.limit:
            return matches[: filters.limit]
        return matches

    async def startup_detail_for(self, investor_user_id: int, profile_id: int) -> dict:
        """
        Detalle de una startup visto por un inversor, con su match_score.

        El score es 0 si el inversor todavía no tiene perfil.

        Raises:
            ProfileNotFoundError: Si la startup no existe o su usuario no está activo
        """
        startup = await self.startup_repo.get_by_id(profile_id)
        if not startup:
            raise ProfileNotFoundError(ROLE_STARTUP, profile_id=profile_id)

        owner = await self.user_repo.get_by_id(startup.get("user_id"))
        if not _is_active(owner):
            raise ProfileNotFoundError(ROLE_STARTUP, profile_id=profile_id)

        investor, industry_names, stage_names = await asyncio.gather(
            self.investor_repo.get_by_user_id(investor_user_id),
            self.lookup_repo.industry_names(),
            self.lookup_repo.stage_names(),
        )

        match_score = 0
        if investor:
            industries_pref, stages_pref = self._investor_preferences(investor)
            match_score = score(startup, investor, industries_pref, stages_pref)

        return {
            **startup,
            **_owner_fields(owner),
            "industry_name": industry_names.get(startup.get("industry_id")),
            "stage_name": stage_names.get(startup.get("funding_stage_id")),
            "match_score": match_score,
        }

    async def investor_detail_for(self, startup_user_id: int, profile_id: int) -> dict:
        """
        Detalle de un inversor visto por una startup.

        Incluye las preferencias parseadas y el match_score contra el
        perfil de la startup (0 si no tiene perfil).

        Raises:
            ProfileNotFoundError: Si el inversor no existe o su usuario no está activo
        """
        investor = await self.investor_repo.get_by_id(profile_id)
        if not investor:
            raise ProfileNotFoundError(ROLE_INVESTOR, profile_id=profile_id)

        owner = await self.user_repo.get_by_id(investor.get("user_id"))
        if not _is_active(owner):
            raise ProfileNotFoundError(ROLE_INVESTOR, profile_id=profile_id)

        industries_pref, stages_pref = self._investor_preferences(investor)
        startup = await self.startup_repo.get_by_user_id(startup_user_id)
        match_score = score(startup, investor, industries_pref, stages_pref) if startup else 0

        return {
            **investor,
            **_owner_fields(owner),
            "industries": sorted(industries_pref),
            "stages": sorted(stages_pref),
            "match_score": match_score,
        }

    async def match_stats(self, user_id: int, role: str) -> MatchStats:
        """
        Cuenta matches sin filtros para el dashboard.

        Un rol desconocido devuelve todo en cero.

        Raises:
            ProfileNotFoundError: Si el usuario no tiene perfil
        """
        if role == ROLE_INVESTOR:
            matches = await self.matching_startups_for(user_id)
        elif role == ROLE_STARTUP:
            matches = await self.matching_investors_for(user_id)
        else:
            logger.warning("Rol sin matching", user_id=user_id, role=role)
            return MatchStats()

        threshold = self.settings.top_match_threshold
        total = len(matches)
        top = sum(1 for m in matches if m["match_score"] >= threshold)
        return MatchStats(total_matches=total, top_matches=top, good_matches=total - top)
