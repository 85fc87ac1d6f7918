# Nombre de archivo: test_resolver_allocator.py
# Ubicación de archivo: tests/test_resolver_allocator.py
# Descripción: Pruebas de resolución de nombres por (nombre, rol, cluster) y asignación de IDs

import pytest

from core.directory.schemas import TeamMember, TeamMemberRole
from core.importer.allocator import allocate
from core.importer.errors import AmbiguousReferenceError
from core.importer.resolver import resolve, resolve_member


def _sup(member_id: str, name: str, cluster: str | None = None) -> TeamMember:
    return TeamMember(id=member_id, name=name, role=TeamMemberRole.SUPERVISOR, cluster=cluster)


class TestResolver:
    def test_coincidencia_sin_mayusculas(self) -> None:
        members = [_sup("S001", "Carlos Souza")]
        assert resolve("  carlos SOUZA ", TeamMemberRole.SUPERVISOR, members) == "S001"

    def test_filtra_por_rol(self) -> None:
        members = [
            TeamMember(id="G001", name="Ana", role=TeamMemberRole.GERENTE),
            _sup("S001", "Ana"),
        ]
        assert resolve("Ana", TeamMemberRole.GERENTE, members) == "G001"
        assert resolve("Ana", TeamMemberRole.COORDENADOR, members) is None

    def test_nombre_vacio_o_inexistente(self) -> None:
        members = [_sup("S001", "Carlos")]
        assert resolve("", TeamMemberRole.SUPERVISOR, members) is None
        assert resolve("Outro", TeamMemberRole.SUPERVISOR, members) is None

    def test_desempate_por_cluster(self) -> None:
        members = [_sup("S001", "Carlos", "SALVADOR"), _sup("S002", "Carlos", "FEIRA")]
        assert resolve("Carlos", TeamMemberRole.SUPERVISOR, members, cluster="feira") == "S002"

    def test_ambiguedad_sin_cluster_es_error(self) -> None:
        members = [_sup("S001", "Carlos", "SALVADOR"), _sup("S002", "Carlos", "FEIRA")]
        with pytest.raises(AmbiguousReferenceError) as excinfo:
            resolve("Carlos", TeamMemberRole.SUPERVISOR, members)
        assert excinfo.value.candidates == ["S001", "S002"]

    def test_ambiguedad_en_mismo_cluster_es_error(self) -> None:
        members = [_sup("S001", "Carlos", "SALVADOR"), _sup("S002", "Carlos", "SALVADOR")]
        with pytest.raises(AmbiguousReferenceError):
            resolve("Carlos", TeamMemberRole.SUPERVISOR, members, cluster="SALVADOR")

    def test_integrante_de_cualquier_rol(self) -> None:
        members = [
            TeamMember(id="G001", name="Ana", role=TeamMemberRole.GERENTE),
            _sup("S001", "Carlos"),
            TeamMember(id="T100", name="Carlos", role=TeamMemberRole.TECNICO),
        ]
        assert resolve_member("ana", members) == "G001"
        assert resolve_member("Outro", members) is None
        with pytest.raises(AmbiguousReferenceError) as excinfo:
            resolve_member("Carlos", members)
        assert excinfo.value.candidates == ["S001", "T100"]


class TestAllocator:
    def test_conjunto_vacio(self) -> None:
        assert allocate(TeamMemberRole.SUPERVISOR, []) == "S001"
        assert allocate(TeamMemberRole.COORDENADOR, []) == "CO001"
        assert allocate(TeamMemberRole.GERENTE, []) == "G001"

    def test_maximo_mas_uno(self) -> None:
        assert allocate(TeamMemberRole.SUPERVISOR, ["S001", "S010", "S003"]) == "S011"

    def test_sufijo_no_numerico_cuenta_como_cero(self) -> None:
        assert allocate(TeamMemberRole.GERENTE, ["GX", "G-A"]) == "G001"

    def test_prefijos_distintos_no_interfieren(self) -> None:
        assert allocate(TeamMemberRole.COORDENADOR, ["CO002", "C900", "G005"]) == "CO003"

    def test_tecnico_no_genera_ids(self) -> None:
        with pytest.raises(ValueError):
            allocate(TeamMemberRole.TECNICO, [])
