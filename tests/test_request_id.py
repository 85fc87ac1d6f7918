# Nombre de archivo: test_request_id.py
# Ubicación de archivo: tests/test_request_id.py
# Descripción: Verifica que la API genere o propague X-Request-ID

import uuid

from fastapi.testclient import TestClient

from api.app.main import create_app
from core.repositories.store import InMemoryRecordStore


def _client() -> TestClient:
    return TestClient(create_app(store=InMemoryRecordStore()))


def test_request_id_generado() -> None:
    resp = _client().get("/health")
    assert resp.status_code == 200
    header = resp.headers.get("X-Request-ID")
    assert header is not None
    uuid.UUID(header)


def test_request_id_propagado() -> None:
    rid = str(uuid.uuid4())
    resp = _client().get("/health", headers={"X-Request-ID": rid})
    assert resp.headers.get("X-Request-ID") == rid


def test_request_id_invalido_se_reemplaza() -> None:
    resp = _client().get("/health", headers={"X-Request-ID": "no-es-uuid"})
    header = resp.headers.get("X-Request-ID")
    assert header != "no-es-uuid"
    uuid.UUID(header)
