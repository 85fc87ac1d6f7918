# Nombre de archivo: hierarchy.py
# Ubicación de archivo: core/directory/hierarchy.py
# Descripción: Consultas sobre la jerarquía del equipo (errores de vínculo, subordinados, visibilidad)

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from core.directory.schemas import TeamMember, TeamMemberRole, User, UserRole

# Campo de vínculo de un técnico -> rol que debe tener el destino
TECHNICIAN_LINKS = (
    ("supervisor_id", TeamMemberRole.SUPERVISOR),
    ("coordenador_id", TeamMemberRole.COORDENADOR),
    ("gerente_id", TeamMemberRole.GERENTE),
)


@dataclass(frozen=True)
class HierarchyIssue:
    member_id: str
    member_name: str
    field: str
    detail: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "member_id": self.member_id,
            "member_name": self.member_name,
            "field": self.field,
            "detail": self.detail,
        }


def _check_link(
    member: TeamMember,
    field: str,
    expected: TeamMemberRole,
    index: Dict[str, TeamMember],
    required: bool,
) -> Optional[HierarchyIssue]:
    target_id = getattr(member, field)
    if not target_id:
        if required:
            return HierarchyIssue(member.id, member.name, field, f"sem {expected.value} vinculado")
        return None
    target = index.get(target_id)
    if target is None:
        return HierarchyIssue(member.id, member.name, field, f"{target_id} não existe")
    if target.role is not expected:
        return HierarchyIssue(
            member.id,
            member.name,
            field,
            f"{target_id} é {target.role.value}, esperado {expected.value}",
        )
    return None


def find_hierarchy_issues(members: Iterable[TeamMember]) -> List[HierarchyIssue]:
    """Lista los vínculos jerárquicos ausentes o inválidos.

    Un técnico debe tener supervisor; coordenador y gerente se validan solo si
    están presentes. Supervisores y coordenadores deben reportar a un registro
    del nivel inmediato superior. Los gerentes son raíz.
    """
    members = list(members)
    index = {m.id: m for m in members}
    issues: List[HierarchyIssue] = []
    for member in members:
        if member.role is TeamMemberRole.TECNICO:
            for field, expected in TECHNICIAN_LINKS:
                issue = _check_link(member, field, expected, index, required=field == "supervisor_id")
                if issue:
                    issues.append(issue)
        elif member.role.parent is not None:
            issue = _check_link(member, "reports_to_id", member.role.parent, index, required=True)
            if issue:
                issues.append(issue)
    return issues


def count_hierarchy_errors(members: Iterable[TeamMember]) -> int:
    """Cantidad de integrantes con al menos un vínculo inválido."""
    return len({issue.member_id for issue in find_hierarchy_issues(members)})


def subordinate_ids(members: Iterable[TeamMember], code: str) -> List[str]:
    """IDs que apuntan directamente a ``code`` en cualquiera de sus vínculos."""
    result: List[str] = []
    for member in members:
        links = (
            member.supervisor_id,
            member.coordenador_id,
            member.gerente_id,
            member.controlador_id,
            member.reports_to_id,
        )
        if code in links and member.id != code:
            result.append(member.id)
    return result


def team_for_viewer(members: Iterable[TeamMember], user: User) -> List[TeamMember]:
    """Equipo visible para un usuario: todo para ADMIN, sus subordinados para el resto."""
    members = list(members)
    if user.role is UserRole.ADMIN:
        return members
    code = user.team_member_id or user.id
    allowed = set(subordinate_ids(members, code))
    visible = [m for m in members if m.id in allowed]
    if user.allowed_clusters:
        clusters = {c.casefold() for c in user.allowed_clusters}
        visible = [m for m in visible if (m.cluster or "").casefold() in clusters]
    return visible
