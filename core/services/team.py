# Nombre de archivo: team.py
# Ubicación de archivo: core/services/team.py
# Descripción: Alta/edición manual de integrantes con generación de ID y re-vinculación al renombrar

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from core.directory.schemas import TeamMember, TeamMemberRole
from core.importer.allocator import allocate
from core.repositories.directory import DirectoryRepository
from core.repositories.store import Collection

logger = logging.getLogger(__name__)

_LINK_FIELDS = ("reports_to_id", "supervisor_id", "coordenador_id", "gerente_id")


class MemberConflictError(ValueError):
    pass


@dataclass
class SaveMemberResult:
    member: TeamMember
    created: bool
    relinked: List[str] = field(default_factory=list)

    def to_response(self) -> dict:
        return {
            "member": self.member.model_dump(mode="json"),
            "created": self.created,
            "relinked": list(self.relinked),
        }


def save_member(
    repository: DirectoryRepository,
    member: TeamMember,
    original_id: Optional[str] = None,
) -> SaveMemberResult:
    """Guarda un integrante editado manualmente.

    Un gestor sin ID recibe uno generado. Si ``original_id`` difiere del ID
    nuevo, se borra el registro anterior y todos los vínculos que apuntaban
    a él pasan a apuntar al nuevo.
    """
    members = {m.id: m for m in repository.list_members()}
    if not member.id:
        if member.role is TeamMemberRole.TECNICO:
            raise ValueError("Técnicos exigem ID informado")
        member = member.model_copy(update={"id": allocate(member.role, members.keys())})

    renamed = bool(original_id) and original_id != member.id
    current = members.get(member.id)
    if current is not None and (renamed or current.role.is_manager != member.role.is_manager):
        raise MemberConflictError(f"ID {member.id} já está em uso")

    relinked: List[TeamMember] = []
    if renamed:
        for other in members.values():
            if other.id == original_id:
                continue
            updates = {f: member.id for f in _LINK_FIELDS if getattr(other, f) == original_id}
            if updates:
                relinked.append(other.model_copy(update=updates))

    repository.save(Collection.TEAM_MEMBERS, [member, *relinked])
    if renamed:
        repository.delete(Collection.TEAM_MEMBERS, [original_id])
    created = (original_id or member.id) not in members
    logger.info(
        "action=team_save id=%s role=%s created=%s renamed_from=%s relinked=%s",
        member.id,
        member.role.value,
        created,
        original_id if renamed else None,
        len(relinked),
    )
    return SaveMemberResult(member=member, created=created, relinked=[m.id for m in relinked])


def remove_member(repository: DirectoryRepository, member_id: str) -> List[str]:
    """Eliminación explícita; los vínculos huérfanos quedan como errores de jerarquía."""
    members = {m.id: m for m in repository.list_members()}
    if member_id not in members:
        raise LookupError(f"Integrante {member_id} não encontrado")
    repository.delete(Collection.TEAM_MEMBERS, [member_id])
    orphans = [
        m.id for m in members.values()
        if m.id != member_id and any(getattr(m, f) == member_id for f in _LINK_FIELDS)
    ]
    logger.info("action=team_remove id=%s orphans=%s", member_id, len(orphans))
    return orphans
