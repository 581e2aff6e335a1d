"""
Perfiles de Startup e Inversor.

Son los dos lados del matching. Las preferencias del inversor
(industrias y etapas de financiamiento) se guardan serializadas como
listas JSON de IDs; una lista vacía significa "sin preferencia".
"""

import json
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StartupProfile(BaseModel):
    """Perfil de una startup buscando inversión."""

    model_config = ConfigDict(from_attributes=True)

    profile_id: Optional[int] = Field(None, description="ID asignado por el store")
    user_id: int = Field(..., description="FK al User dueño del perfil")

    # Empresa
    company_name: Optional[str] = Field(None, description="Nombre de la empresa")
    elevator_pitch: Optional[str] = Field(None, max_length=1000)
    location: Optional[str] = Field(None, description="Ubicación como texto libre")
    team_size: Optional[int] = Field(None, ge=0, description="Cantidad de personas")

    # Matching
    industry_id: Optional[int] = Field(None, description="FK a industries")
    funding_stage_id: Optional[int] = Field(None, description="FK a funding_stages")
    funding_goal: Optional[float] = Field(None, ge=0, description="Monto buscado")

    # SWOT
    strengths: Optional[str] = None
    weaknesses: Optional[str] = None
    opportunities: Optional[str] = None
    threats: Optional[str] = None

    # Destacados (los setea el admin)
    is_featured: bool = False
    is_hot: bool = False

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para el store."""
        return self.model_dump(exclude={"profile_id"})


class InvestorProfile(BaseModel):
    """Perfil de un inversor con su rango de ticket y preferencias."""

    model_config = ConfigDict(from_attributes=True)

    profile_id: Optional[int] = Field(None, description="ID asignado por el store")
    user_id: int = Field(..., description="FK al User dueño del perfil")

    # Identidad
    investor_name: Optional[str] = None
    investor_type: Optional[str] = Field(
        None, description="Angel, VC, Corporate, Family Office..."
    )
    investment_thesis: Optional[str] = Field(None, max_length=2000)
    company: Optional[str] = None
    location: Optional[str] = Field(None, description="Ubicación como texto libre")

    # Rango de inversión
    budget_min: Optional[float] = Field(None, ge=0, description="Ticket mínimo")
    budget_max: Optional[float] = Field(None, ge=0, description="Ticket máximo")

    # Preferencias (IDs de industries / funding_stages)
    industries: list[int] = Field(default_factory=list)
    funding_stages: list[int] = Field(default_factory=list)

    def to_db_dict(self) -> dict:
        """
        Convierte a diccionario para el store.

        Las preferencias se guardan como strings JSON, igual que las
        escribe el resto de la plataforma.
        """
        data = self.model_dump(exclude={"profile_id"})
        data["industries"] = json.dumps(self.industries)
        data["funding_stages"] = json.dumps(self.funding_stages)
        return data
