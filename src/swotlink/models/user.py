"""
Modelo de Usuario.

Los perfiles de startup e inversor referencian a un usuario por
`user_id` (relación 1:1). Un usuario inactivo o inexistente deja a su
perfil fuera del matching.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from swotlink.config import ROLE_INVESTOR, ROLE_STARTUP


class User(BaseModel):
    """Usuario de la plataforma."""

    model_config = ConfigDict(from_attributes=True)

    # Identificadores
    user_id: Optional[int] = Field(None, description="ID asignado por el store")
    email: str = Field(..., description="Email de login")
    first_name: str = Field(default="", description="Nombre")
    last_name: str = Field(default="", description="Apellido")

    # Rol y estado
    role: str = Field(..., pattern=f"^({ROLE_STARTUP}|{ROLE_INVESTOR})$")
    is_active: bool = Field(default=True, description="Cuenta activa")
    is_verified: bool = Field(default=False, description="Email/KYC verificado")
    is_suspended: bool = Field(default=False)
    profile_completion: int = Field(default=0, ge=0, le=100)

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para inserción en el store."""
        return self.model_dump(exclude={"user_id"})
