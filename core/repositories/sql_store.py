# Nombre de archivo: sql_store.py
# Ubicación de archivo: core/repositories/sql_store.py
# Descripción: RecordStore sobre SQLAlchemy (PostgreSQL vía psycopg en producción)

from __future__ import annotations

import logging
from typing import Callable, List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.repositories.store import Collection, KEY_FIELDS, Record, RecordStore, StoreError
from db.models.directory import AppConfigRecord, OccurrenceRecord, ProfileRecord, TeamMemberRecord

logger = logging.getLogger(__name__)

MODELS = {
    Collection.TEAM_MEMBERS: TeamMemberRecord,
    Collection.PROFILES: ProfileRecord,
    Collection.OCCURRENCES: OccurrenceRecord,
    Collection.APP_CONFIG: AppConfigRecord,
}


class SqlRecordStore(RecordStore):
    """Cada operación abre su propia sesión y confirma o revierte completa.

    Un upsert es atómico para el bloque recibido; el motor de importación
    envía bloques sucesivos, así que una falla deja escritos los anteriores.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def read_all(self, collection: Collection) -> List[Record]:
        model = MODELS[Collection(collection)]
        columns = [c.name for c in model.__table__.columns]
        session = self._session_factory()
        try:
            rows = session.execute(select(model)).scalars().all()
            return [{name: getattr(row, name) for name in columns} for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        finally:
            session.close()

    def upsert(self, collection: Collection, records: List[Record]) -> None:
        model = MODELS[Collection(collection)]
        columns = {c.name for c in model.__table__.columns}
        session = self._session_factory()
        try:
            for record in records:
                session.merge(model(**{k: v for k, v in record.items() if k in columns}))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(
                "action=sql_upsert collection=%s size=%s error=%s",
                Collection(collection).value,
                len(records),
                exc,
            )
            raise StoreError(str(exc)) from exc
        finally:
            session.close()

    def delete(self, collection: Collection, keys: List[str]) -> None:
        if not keys:
            return
        model = MODELS[Collection(collection)]
        key_column = getattr(model, KEY_FIELDS[Collection(collection)])
        session = self._session_factory()
        try:
            session.execute(delete(model).where(key_column.in_(keys)))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError(str(exc)) from exc
        finally:
            session.close()
