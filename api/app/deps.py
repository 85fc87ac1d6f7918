# Nombre de archivo: deps.py
# Ubicación de archivo: api/app/deps.py
# Descripción: Dependencias FastAPI compartidas (repositorio del directorio y métricas)

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Request

from core.config import get_settings
from core.metrics import Metrics
from core.repositories.directory import DirectoryRepository
from core.repositories.store import InMemoryRecordStore, RecordStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def default_store() -> RecordStore:
    """Backend por defecto: PostgreSQL si está configurado, si no memoria."""
    if get_settings().database.enabled:
        from core.repositories.sql_store import SqlRecordStore
        from db.session import SessionLocal

        logger.info("action=store_init backend=sql")
        return SqlRecordStore(SessionLocal)
    logger.warning("action=store_init backend=memory")
    return InMemoryRecordStore()


def get_repository(request: Request) -> DirectoryRepository:
    store = getattr(request.app.state, "store", None) or default_store()
    return DirectoryRepository(store)


def get_metrics(request: Request) -> Metrics:
    return request.app.state.metrics
