# Nombre de archivo: test_team_service.py
# Ubicación de archivo: tests/test_team_service.py
# Descripción: Pruebas de alta/edición manual de integrantes (IDs generados, renombre y conflictos)

import pytest

from core.directory.schemas import TeamMember, TeamMemberRole
from core.repositories.directory import DirectoryRepository
from core.services.team import MemberConflictError, remove_member, save_member


def test_gestor_sin_id_recibe_uno(seeded_repository: DirectoryRepository) -> None:
    member = TeamMember(id="", name="Nova Supervisora", role=TeamMemberRole.SUPERVISOR, reports_to_id="CO001")
    result = save_member(seeded_repository, member)

    assert result.created is True
    assert result.member.id == "S002"
    assert seeded_repository.get_member("S002").name == "Nova Supervisora"


def test_tecnico_sin_id_es_rechazado(repository: DirectoryRepository) -> None:
    with pytest.raises(ValueError):
        save_member(repository, TeamMember(id="", name="Sem ID", role=TeamMemberRole.TECNICO))


def test_renombrar_id_revincula(seeded_repository: DirectoryRepository) -> None:
    current = seeded_repository.get_member("S001")
    renamed = current.model_copy(update={"id": "S050"})
    result = save_member(seeded_repository, renamed, original_id="S001")

    assert result.created is False
    assert sorted(result.relinked) == ["T100", "T200"]
    assert seeded_repository.get_member("S001") is None
    assert seeded_repository.get_member("T100").supervisor_id == "S050"
    assert seeded_repository.get_member("T200").supervisor_id == "S050"


def test_renombrar_a_id_ocupado_es_conflicto(seeded_repository: DirectoryRepository) -> None:
    current = seeded_repository.get_member("S001")
    with pytest.raises(MemberConflictError):
        save_member(seeded_repository, current.model_copy(update={"id": "CO001"}), original_id="S001")
    assert seeded_repository.get_member("S001") is not None


def test_id_de_tecnico_no_se_reusa_para_gestor(seeded_repository: DirectoryRepository) -> None:
    member = TeamMember(id="T100", name="Outro", role=TeamMemberRole.SUPERVISOR)
    with pytest.raises(MemberConflictError):
        save_member(seeded_repository, member)


def test_edicion_simple(seeded_repository: DirectoryRepository) -> None:
    current = seeded_repository.get_member("T200")
    result = save_member(seeded_repository, current.model_copy(update={"filial": "SALVADOR"}), original_id="T200")

    assert result.created is False
    assert seeded_repository.get_member("T200").filial == "SALVADOR"


def test_baja_informa_huerfanos(seeded_repository: DirectoryRepository) -> None:
    orphans = remove_member(seeded_repository, "S001")

    assert orphans == ["T100", "T200"]
    assert seeded_repository.get_member("S001") is None
    with pytest.raises(LookupError):
        remove_member(seeded_repository, "S001")
