"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> swotlink/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Almacenamiento
    data_dir: Path = Field(
        _PROJECT_ROOT / "data",
        description="Directorio donde viven los archivos JSON de cada colección",
    )
    serialize_writes: bool = Field(
        True,
        description="Serializa las escrituras por colección con un lock async",
    )
    write_retry_attempts: int = Field(
        3, ge=1, le=10, description="Intentos de escritura ante errores de disco"
    )

    # Matching
    top_match_threshold: int = Field(
        80, ge=0, le=100, description="Score mínimo para contar como top match"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Roles de usuario
ROLE_STARTUP = "Startup"
ROLE_INVESTOR = "Investor"

ROLES = [ROLE_STARTUP, ROLE_INVESTOR]
