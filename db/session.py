# Nombre de archivo: session.py
# Ubicación de archivo: db/session.py
# Descripción: Engine y fábrica de sesiones SQLAlchemy creados bajo demanda a partir de la configuración

from __future__ import annotations

from functools import lru_cache
from os import getenv

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.config import get_settings


def _engine_url() -> str:
    url = getenv("ALEMBIC_URL") or get_settings().database.url
    if not url:
        raise RuntimeError("DATABASE_URL/POSTGRES_HOST no configurados")
    return url


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_engine(_engine_url(), pool_pre_ping=True, pool_recycle=1800)


@lru_cache(maxsize=1)
def get_sessionmaker() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)


def SessionLocal() -> Session:
    return get_sessionmaker()()
