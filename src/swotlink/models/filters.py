"""
Filtros de búsqueda para el matching.

Todos los filtros son hard: un candidato que no cumple se descarta antes
de calcular el score. Los flags `ignore_*` relajan los filtros derivados
de las preferencias del perfil propio.
"""

from typing import Optional

from pydantic import BaseModel, Field


class StartupFilters(BaseModel):
    """Filtros que aplica un inversor al buscar startups."""

    # Relajar preferencias del inversor
    ignore_industry: bool = Field(default=False)
    ignore_stage: bool = Field(default=False)
    ignore_budget: bool = Field(
        default=False, description="No exigir que el funding goal entre en el rango"
    )

    # Filtros de UI
    industry_id: Optional[int] = None
    stage_id: Optional[int] = None
    min_funding: Optional[float] = Field(None, ge=0)
    max_funding: Optional[float] = Field(None, ge=0)
    location: Optional[str] = Field(None, description="Substring, sin distinguir mayúsculas")
    min_team_size: Optional[int] = Field(None, ge=0)
    search: Optional[str] = Field(
        None, description="Texto libre sobre nombre, pitch, ubicación e industria"
    )
    featured_only: bool = False
    hot_only: bool = False

    limit: Optional[int] = Field(None, ge=1)


class InvestorFilters(BaseModel):
    """Filtros que aplica una startup al buscar inversores."""

    ignore_industry: bool = Field(default=False)
    ignore_stage: bool = Field(default=False)
    show_all: bool = Field(
        default=False,
        description="Incluir inversores sin match de preferencias (is_match=False)",
    )

    investor_type: Optional[str] = None
    min_budget: Optional[float] = Field(None, ge=0)
    max_budget: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    search: Optional[str] = Field(
        None, description="Texto libre sobre nombre, tesis, ubicación y tipo"
    )

    limit: Optional[int] = Field(None, ge=1)
