# Nombre de archivo: test_api_directory.py
# Ubicación de archivo: tests/test_api_directory.py
# Descripción: Pruebas de la API del directorio (importación, exportación, equipo, ocurrencias y configuración)

import io

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from api.app.main import create_app
from core.repositories.directory import DirectoryRepository
from core.repositories.store import InMemoryRecordStore

MANAGERS_CSV = "ID;Nome;Cargo;Superior Imediato;Cluster;Filial\nG001;Ana;Gerente;;SALVADOR;\nS010;Bruno;Supervisor;Ana;SALVADOR;SALVADOR\n"


@pytest.fixture
def client(store: InMemoryRecordStore, seeded_repository: DirectoryRepository) -> TestClient:
    return TestClient(create_app(store=store))


@pytest.fixture
def empty_client() -> TestClient:
    return TestClient(create_app(store=InMemoryRecordStore()))


def _upload(client: TestClient, kind: str, content: bytes, filename: str = "dados.csv", mode: str | None = None):
    url = f"/api/imports/{kind}" + (f"?mode={mode}" if mode else "")
    return client.post(url, files={"file": (filename, content, "text/csv")})


# ================================
# Importación
# ================================
def test_importar_gestores(empty_client: TestClient) -> None:
    resp = _upload(empty_client, "managers", MANAGERS_CSV.encode("utf-8"))

    assert resp.status_code == 200
    data = resp.json()
    assert (data["total"], data["new"], data["updated"], data["errors"]) == (2, 2, 0, [])
    assert data["persisted"] == 2
    team = empty_client.get("/api/team").json()
    assert {m["id"]: m["reports_to_id"] for m in team} == {"G001": None, "S010": "G001"}

    metrics = empty_client.get("/metrics").json()
    assert metrics["imports_total"] == 1
    assert metrics["rows_new"] == 2


def test_importar_xlsx(empty_client: TestClient) -> None:
    df = pd.DataFrame(
        [["G001", "Ana", "Gerente", "", "SALVADOR", ""]],
        columns=["ID", "Nome", "Cargo", "Superior Imediato", "Cluster", "Filial"],
    )
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False)

    resp = _upload(empty_client, "managers", buf.getvalue(), filename="gestores.xlsx")

    assert resp.status_code == 200
    assert resp.json()["new"] == 1


def test_formato_y_tipo_invalidos(empty_client: TestClient) -> None:
    assert _upload(empty_client, "managers", b"x", filename="dados.pdf").status_code == 415
    assert _upload(empty_client, "desconhecido", b"x").status_code == 422
    assert _upload(empty_client, "managers", b"x", mode="TOTAL").status_code == 422


def test_archivo_vacio_devuelve_reporte(empty_client: TestClient) -> None:
    resp = _upload(empty_client, "technicians", b"")

    assert resp.status_code == 200
    assert resp.json()["errors"] == ["Arquivo vazio"]


def test_replace_por_api(client: TestClient) -> None:
    csv_text = "ID;Nome;Supervisor;Coordenador;Gerente;Controlador;Cluster;Filial;Segmento\nT100;João Silva;Carlos Souza;;;;SALVADOR;SALVADOR;BA\n"
    resp = _upload(client, "technicians", csv_text.encode("utf-8"), mode="REPLACE")

    assert resp.status_code == 200
    ids = {m["id"] for m in client.get("/api/team", params={"role": "Técnico"}).json()}
    assert ids == {"T100"}


def test_importar_geo(client: TestClient) -> None:
    resp = client.post(
        "/api/imports/geo",
        files={"file": ("geo.csv", "Cluster;Filial;Setor\nFORTALEZA;FORTALEZA;CE_01\n".encode("utf-8"), "text/csv")},
    )

    assert resp.status_code == 200
    assert resp.json()["clusters_added"] == 1
    assert client.get("/api/config/geo/maps").json()["branch_to_cluster"]["FORTALEZA"] == "FORTALEZA"


# ================================
# Exportación
# ================================
def test_exportar_tecnicos_con_bom(client: TestClient) -> None:
    resp = client.get("/api/exports/technicians")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.content.startswith("\ufeff".encode("utf-8"))
    lines = resp.content.decode("utf-8-sig").splitlines()
    assert lines[0] == "ID;Nome;Supervisor;Coordenador;Gerente;Controlador;Cluster;Filial;Segmento;Status"
    assert lines[1] == "T100;João Silva;Carlos Souza;Marta Lima;Ana Costa;;SALVADOR;SALVADOR;;Ativo"


def test_exportacion_reimportable(client: TestClient) -> None:
    exported = client.get("/api/exports/managers").content

    resp = _upload(client, "managers", exported)

    data = resp.json()
    assert data["errors"] == []
    assert (data["new"], data["updated"]) == (0, data["total"])


def test_plantillas_y_tipos_desconocidos(client: TestClient) -> None:
    template = client.get("/api/exports/occurrences/template")
    assert template.status_code == 200
    assert template.content.decode("utf-8-sig").startswith("Data;Hora;Técnico")
    assert client.get("/api/exports/desconhecido").status_code == 404


def test_exportar_xlsx(client: TestClient) -> None:
    resp = client.get("/api/exports/occurrences.xlsx")

    assert resp.status_code == 200
    df = pd.read_excel(io.BytesIO(resp.content), engine="openpyxl")
    assert list(df.columns)[:3] == ["ID", "Data Registro", "Hora Registro"]


# ================================
# Equipo
# ================================
def test_errores_de_jerarquia(client: TestClient) -> None:
    assert client.get("/api/team/hierarchy-errors").json() == {"count": 0, "issues": []}

    assert client.delete("/api/team/S001").json()["orphans"] == ["T100", "T200"]
    data = client.get("/api/team/hierarchy-errors").json()
    assert data["count"] == 2
    assert {i["member_id"] for i in data["issues"]} == {"T100", "T200"}


def test_alta_de_gestor_y_conflicto(client: TestClient) -> None:
    resp = client.put("/api/team", json={"name": "Nova", "role": "Supervisor", "reports_to_id": "CO001"})
    assert resp.status_code == 200
    assert resp.json()["member"]["id"] == "S002"

    conflict = client.put("/api/team", json={"id": "T100", "name": "X", "role": "Gerente"})
    assert conflict.status_code == 409
    assert client.get("/api/team/CO001/subordinates").json()["subordinates"] == ["S001", "T100", "S002"]


# ================================
# Ocurrencias
# ================================
def test_ciclo_de_vida_de_ocurrencia(client: TestClient) -> None:
    created = client.post(
        "/api/occurrences",
        json={"user_id": "T100", "registered_by": "maria.santos", "date": "2024-03-01", "category": "Atraso"},
    )
    assert created.status_code == 201
    occ = created.json()
    assert occ["cluster"] == "SALVADOR"

    analyzed = client.post(f"/api/occurrences/{occ['id']}/status", json={"status": "EM_ANALISE", "actor": "admin"})
    assert analyzed.status_code == 200
    invalid = client.post(f"/api/occurrences/{occ['id']}/status", json={"status": "REGISTRADA", "actor": "admin"})
    assert invalid.status_code == 409

    done = client.post(f"/api/occurrences/{occ['id']}/status", json={"status": "CONCLUIDA", "actor": "admin"})
    assert done.status_code == 200
    assert [e["action"] for e in done.json()["audit_trail"]] == ["REGISTRO", "EM_ANALISE", "CONCLUIDA"]

    locked = client.patch(f"/api/occurrences/{occ['id']}", json={"actor": "admin", "changes": {"description": "x"}})
    assert locked.status_code == 409
    escalation = client.post(f"/api/occurrences/{occ['id']}/escalation", json={"level": "Gerente", "actor": "admin"})
    assert escalation.status_code == 409


def test_ocurrencia_inexistente_o_tecnico_invalido(client: TestClient) -> None:
    assert client.post("/api/occurrences/nada/status", json={"status": "CONCLUIDA", "actor": "a"}).status_code == 404
    resp = client.post(
        "/api/occurrences",
        json={"user_id": "S001", "registered_by": "a", "date": "2024-03-01", "category": "Atraso"},
    )
    assert resp.status_code == 400


# ================================
# Configuración y respaldo
# ================================
def test_geo_duplicado_es_conflicto(client: TestClient) -> None:
    resp = client.put("/api/config/geo", json=[{"name": "A", "branches": []}, {"name": "a", "branches": []}])
    assert resp.status_code == 409


def test_motivos(client: TestClient) -> None:
    resp = client.put("/api/config/reasons", json=[{"category": "Atraso", "reasons": ["Trânsito"]}])
    assert resp.status_code == 200
    added = client.post("/api/config/reasons/categories")
    assert added.status_code == 201
    assert [c["category"] for c in added.json()] == ["Atraso", "NOVA CATEGORIA (EDITAR)"]


def test_respaldo_y_restauracion(client: TestClient) -> None:
    backup = client.get("/api/backup").json()
    target = TestClient(create_app(store=InMemoryRecordStore()))

    result = target.post("/api/backup/restore", json=backup)

    assert result.json() == {"success": True, "errors": []}
    assert len(target.get("/api/team").json()) == 5
