# Nombre de archivo: secrets.py
# Ubicación de archivo: core/secrets.py
# Descripción: Lectura de credenciales (contraseña de PostgreSQL) desde entorno o Docker secrets

"""Credenciales desde variables de entorno o archivos en ``/run/secrets``.

Si la variable no está definida se busca un archivo con el mismo nombre en
minúsculas dentro del directorio de secretos (configurable con
``SECRETS_DIR`` para pruebas).
"""

from pathlib import Path
from typing import Optional
import os


def get_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    """Obtiene el secreto ``name`` o ``default`` si no está disponible."""
    value = os.getenv(name)
    if value:
        return value

    secret_file = Path(os.getenv("SECRETS_DIR", "/run/secrets")) / name.lower()
    try:
        return secret_file.read_text(encoding="utf-8").strip() or default
    except (FileNotFoundError, PermissionError):
        return default
