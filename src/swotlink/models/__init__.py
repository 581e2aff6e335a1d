"""
Modelos de datos del sistema.

- User: cuenta de la plataforma
- StartupProfile / InvestorProfile: los dos lados del matching
- StartupFilters / InvestorFilters: filtros hard de búsqueda
- SavedMatch: candidatos guardados
"""

from swotlink.models.user import User
from swotlink.models.profiles import StartupProfile, InvestorProfile
from swotlink.models.filters import StartupFilters, InvestorFilters
from swotlink.models.saved_match import SavedMatch

__all__ = [
    # Usuarios
    "User",
    # Perfiles
    "StartupProfile",
    "InvestorProfile",
    # Matching
    "StartupFilters",
    "InvestorFilters",
    # Guardados
    "SavedMatch",
]
