# Nombre de archivo: test_backup.py
# Ubicación de archivo: tests/test_backup.py
# Descripción: Pruebas de respaldo JSON y restauración por bloques

from core.directory.schemas import ReasonCategory
from core.repositories.directory import DirectoryRepository
from core.repositories.store import Collection, InMemoryRecordStore
from core.services.backup import export_system_data, restore_system_data
from core.services.occurrences import register_occurrence


def _with_occurrence(repository: DirectoryRepository) -> None:
    repository.save_occurrence(
        register_occurrence(
            user_id="T100",
            user_name="João Silva",
            registered_by="maria.santos",
            date="2024-03-01",
            category="Atraso",
        )
    )
    repository.save_reasons([ReasonCategory(category="Atraso", reasons=["Trânsito"])])


def test_estructura_del_respaldo(seeded_repository: DirectoryRepository) -> None:
    _with_occurrence(seeded_repository)
    backup = export_system_data(seeded_repository)

    assert backup["metadata"]["version"] == "2.0"
    assert backup["metadata"]["generatedBy"] == "Admin Panel"
    data = backup["data"]
    assert len(data["team"]) == 5
    assert len(data["users"]) == 1
    assert len(data["occurrences"]) == 1
    assert data["configs"]["reasons"] == [{"category": "Atraso", "reasons": ["Trânsito"]}]
    assert data["configs"]["geo"][0]["name"] == "SALVADOR"


def test_restaurar_en_directorio_vacio(seeded_repository: DirectoryRepository) -> None:
    _with_occurrence(seeded_repository)
    backup = export_system_data(seeded_repository)
    target = DirectoryRepository(InMemoryRecordStore())

    result = restore_system_data(target, backup)

    assert result.to_response() == {"success": True, "errors": []}
    assert {m.id for m in target.list_members()} == {"G001", "CO001", "S001", "T100", "T200"}
    assert target.list_occurrences()[0].audit_trail[0].action == "REGISTRO"
    assert target.get_geo() == seeded_repository.get_geo()


def test_restaurar_con_limpieza(seeded_repository: DirectoryRepository) -> None:
    backup = export_system_data(seeded_repository)
    backup["data"]["team"] = backup["data"]["team"][:1]
    _with_occurrence(seeded_repository)

    result = restore_system_data(seeded_repository, backup, clear_first=True)

    assert result.success is True
    assert [m.id for m in seeded_repository.list_members()] == ["G001"]
    assert seeded_repository.list_occurrences() == []
    assert [u.id for u in seeded_repository.list_users()] == ["maria.santos"]


def test_respaldo_invalido() -> None:
    repository = DirectoryRepository(InMemoryRecordStore())
    result = restore_system_data(repository, {"data": {"team": []}})

    assert result.success is False
    assert result.errors == ["Arquivo de backup inválido ou corrompido."]


def test_falla_de_bloque_de_ocurrencias(seeded_repository: DirectoryRepository) -> None:
    _with_occurrence(seeded_repository)
    backup = export_system_data(seeded_repository)
    occurrence_id = backup["data"]["occurrences"][0]["id"]
    store = InMemoryRecordStore(fail_on={(Collection.OCCURRENCES, occurrence_id)})

    result = restore_system_data(DirectoryRepository(store), backup)

    assert result.success is False
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Erro ao restaurar Ocorrências (Lote 0)")
    assert len(DirectoryRepository(store).list_members()) == 5
