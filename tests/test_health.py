# Nombre de archivo: test_health.py
# Ubicación de archivo: tests/test_health.py
# Descripción: Pruebas para las rutas de health y verificación de base de la API

import pytest
from fastapi.testclient import TestClient

from api.app.main import create_app
from core.repositories.directory import DirectoryRepository
from core.repositories.store import InMemoryRecordStore


client = TestClient(create_app(store=InMemoryRecordStore()))


def test_health_returns_ok() -> None:
    """Verifica que el endpoint /health responde correctamente."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "api"
    assert "time" in data
    assert data["store"] == "memory"


def test_health_resume_el_directorio(store: InMemoryRecordStore, seeded_repository: DirectoryRepository) -> None:
    """El resumen refleja integrantes y errores de jerarquía del almacén."""
    seeded = TestClient(create_app(store=store))
    assert seeded.get("/health").json()["directory"] == {
        "members": 5,
        "active_members": 5,
        "occurrences": 0,
        "hierarchy_errors": 0,
    }

    seeded.delete("/api/team/S001")
    assert seeded.get("/health").json()["directory"]["hierarchy_errors"] == 2


def test_health_version(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("API_BUILD_VERSION", raising=False)
    monkeypatch.delenv("APP_VERSION", raising=False)
    assert client.get("/health/version").json() == {
        "status": "ok",
        "service": "api",
        "version": "0.1.0",
        "env": "test",
    }

    monkeypatch.setenv("API_BUILD_VERSION", "2026.10.16")
    assert client.get("/health/version").json()["version"] == "2026.10.16"


def test_db_check_sin_base_configurada() -> None:
    """Sin DATABASE_URL el backend es el almacén en memoria."""
    response = client.get("/db-check")
    assert response.status_code == 200
    assert response.json() == {"db": "disabled", "store": "memory"}
