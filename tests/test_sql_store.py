# Nombre de archivo: test_sql_store.py
# Ubicación de archivo: tests/test_sql_store.py
# Descripción: Pruebas del RecordStore SQLAlchemy sobre SQLite en memoria

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import db.models.directory  # noqa: F401
from core.importer.engine import run_import
from core.repositories.directory import DirectoryRepository
from core.repositories.sql_store import SqlRecordStore
from core.repositories.store import Collection, StoreError
from db.base import Base


@pytest.fixture
def sql_store() -> SqlRecordStore:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    ).execution_options(schema_translate_map={"app": None})
    Base.metadata.create_all(engine)
    return SqlRecordStore(sessionmaker(bind=engine, autoflush=False))


def test_importacion_completa_sobre_sql(sql_store: SqlRecordStore) -> None:
    repository = DirectoryRepository(sql_store)
    managers = "ID;Nome;Cargo;Superior Imediato;Cluster;Filial\nG001;Ana;Gerente;;SALVADOR;\nS010;Bruno;Supervisor;Ana;SALVADOR;SALVADOR"

    report = run_import(managers, "managers", "MERGE", repository)

    assert report.errors == []
    assert repository.get_member("S010").reports_to_id == "G001"

    again = run_import(managers, "managers", "MERGE", repository)
    assert (again.new, again.updated) == (0, 2)
    assert len(repository.list_members()) == 2


def test_configuracion_json(sql_store: SqlRecordStore) -> None:
    sql_store.upsert(Collection.APP_CONFIG, [{"key": "reasons_tree", "value": [{"category": "A", "reasons": ["x"]}]}])
    repository = DirectoryRepository(sql_store)

    assert repository.get_reasons()[0].reasons == ["x"]


def test_upsert_fallido_revierte_el_bloque(sql_store: SqlRecordStore) -> None:
    sql_store.upsert(Collection.TEAM_MEMBERS, [{"id": "T1", "name": "Ana", "role": "Técnico", "active": True}])

    with pytest.raises(StoreError):
        sql_store.upsert(
            Collection.TEAM_MEMBERS,
            [
                {"id": "T2", "name": "Bia", "role": "Técnico", "active": True},
                {"id": "T3", "name": None, "role": "Técnico", "active": True},
            ],
        )

    assert [r["id"] for r in sql_store.read_all(Collection.TEAM_MEMBERS)] == ["T1"]


def test_borrado_por_clave(sql_store: SqlRecordStore) -> None:
    sql_store.upsert(
        Collection.PROFILES,
        [
            {"id": "a", "name": "A", "role": "ADMIN", "allowed_clusters": [], "allowed_branches": []},
            {"id": "b", "name": "B", "role": "CONTROLADOR", "allowed_clusters": ["SALVADOR"], "allowed_branches": []},
        ],
    )
    sql_store.delete(Collection.PROFILES, ["a", "inexistente"])

    records = sql_store.read_all(Collection.PROFILES)
    assert [r["id"] for r in records] == ["b"]
    assert records[0]["allowed_clusters"] == ["SALVADOR"]
