# Nombre de archivo: conftest.py
# Ubicación de archivo: tests/conftest.py
# Descripción: Configuraciones comunes para Pytest (PYTHONPATH y fixtures del directorio en memoria)

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:  # pragma: no cover - inicialización
    sys.path.insert(0, str(ROOT_DIR))

from core.config import get_settings  # noqa: E402
from core.directory.schemas import GeoBranch, GeoCluster, TeamMember, TeamMemberRole, User  # noqa: E402
from core.repositories.directory import DirectoryRepository  # noqa: E402
from core.repositories.store import Collection, InMemoryRecordStore  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("POSTGRES_HOST", raising=False)
    monkeypatch.setenv("ENV", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def repository(store: InMemoryRecordStore) -> DirectoryRepository:
    return DirectoryRepository(store)


@pytest.fixture
def seeded_repository(repository: DirectoryRepository) -> DirectoryRepository:
    """Jerarquía mínima: un gerente, un coordenador, un supervisor y dos técnicos."""
    members = [
        TeamMember(id="G001", name="Ana Costa", role=TeamMemberRole.GERENTE, cluster="SALVADOR"),
        TeamMember(
            id="CO001",
            name="Marta Lima",
            role=TeamMemberRole.COORDENADOR,
            reports_to_id="G001",
            cluster="SALVADOR",
        ),
        TeamMember(
            id="S001",
            name="Carlos Souza",
            role=TeamMemberRole.SUPERVISOR,
            reports_to_id="CO001",
            cluster="SALVADOR",
        ),
        TeamMember(
            id="T100",
            name="João Silva",
            role=TeamMemberRole.TECNICO,
            supervisor_id="S001",
            coordenador_id="CO001",
            gerente_id="G001",
            cluster="SALVADOR",
            filial="SALVADOR",
        ),
        TeamMember(
            id="T200",
            name="Pedro Alves",
            role=TeamMemberRole.TECNICO,
            supervisor_id="S001",
            cluster="SALVADOR",
            filial="FEIRA",
        ),
    ]
    repository.save(Collection.TEAM_MEMBERS, members)
    repository.save_geo(
        [
            GeoCluster(
                name="SALVADOR",
                branches=[
                    GeoBranch(name="SALVADOR", sectors=["BKT_SALVADOR_AREA_01"]),
                    GeoBranch(name="FEIRA", sectors=[]),
                ],
            )
        ]
    )
    repository.save(Collection.PROFILES, [User(id="maria.santos", name="Maria Santos", nickname="Maria")])
    return repository
