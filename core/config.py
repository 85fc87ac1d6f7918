# Nombre de archivo: config.py
# Ubicación de archivo: core/config.py
# Descripción: Configuración centralizada (entorno) para el motor de directorio y la API

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from os import getenv

from core.secrets import get_secret


@dataclass(slots=True)
class ImportSettings:
    """Parámetros del motor de importación de planillas."""

    chunk_size: int
    default_mode: str
    soft_replace: bool


@dataclass(slots=True)
class DatabaseSettings:
    url: str | None
    enabled: bool


@dataclass(slots=True)
class Settings:
    env: str
    log_level: str
    imports: ImportSettings
    database: DatabaseSettings

    def __init__(self) -> None:
        self.env = getenv("ENV", "development").lower()
        self.log_level = getenv("LOG_LEVEL", "INFO").upper()
        chunk = int(getenv("IMPORT_CHUNK_SIZE", "100"))
        self.imports = ImportSettings(
            chunk_size=chunk if chunk > 0 else 100,
            default_mode=getenv("IMPORT_DEFAULT_MODE", "MERGE").upper(),
            soft_replace=getenv("IMPORT_REPLACE_SOFT", "false").lower() in ("true", "1", "yes"),
        )
        url = getenv("DATABASE_URL") or _postgres_url()
        self.database = DatabaseSettings(url=url, enabled=bool(url))


def _postgres_url() -> str | None:
    host = getenv("POSTGRES_HOST")
    if not host:
        return None
    user = getenv("POSTGRES_USER", "diario")
    password = get_secret("POSTGRES_PASSWORD", "cambiar-este-password")
    port = getenv("POSTGRES_PORT", "5432")
    name = getenv("POSTGRES_DB", "diario")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{name}"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
