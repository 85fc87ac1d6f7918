# Nombre de archivo: db.py
# Ubicación de archivo: api/app/db.py
# Descripción: Verificación básica de PostgreSQL (SELECT 1) cuando hay base configurada

import logging

from sqlalchemy import text

from core.config import get_settings
from db.session import get_engine


logger = logging.getLogger(__name__)


def db_health() -> dict:
    """Realiza un SELECT 1 y devuelve info básica."""
    if not get_settings().database.enabled:
        return {"db": "disabled", "store": "memory"}
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
            server_version = conn.exec_driver_sql("SHOW server_version").scalar()
    except Exception as exc:  # noqa: BLE001
        logger.warning("action=db_health error=%s", exc)
        return {"db": "error", "detail": str(exc)}
    return {"db": "ok", "server_version": server_version}
