# Nombre de archivo: allocator.py
# Ubicación de archivo: core/importer/allocator.py
# Descripción: Generación de IDs secuenciales por rol (S001, CO001, G001)

from __future__ import annotations

from typing import Iterable

from core.directory.schemas import TeamMemberRole

ROLE_PREFIX = {
    TeamMemberRole.SUPERVISOR: "S",
    TeamMemberRole.COORDENADOR: "CO",
    TeamMemberRole.GERENTE: "G",
}
ID_WIDTH = 3


def _suffix_number(identifier: str, prefix: str) -> int:
    suffix = identifier[len(prefix):]
    return int(suffix) if suffix.isdigit() else 0


def allocate(role: TeamMemberRole, existing_ids: Iterable[str]) -> str:
    """Devuelve el siguiente ID libre para ``role``.

    Se toma el máximo sufijo numérico de los IDs con el prefijo del rol (los
    sufijos no numéricos cuentan como 0) y se suma 1. ``existing_ids`` debe
    incluir lo ya asignado en el mismo lote.
    """
    prefix = ROLE_PREFIX.get(role)
    if prefix is None:
        raise ValueError(f"O papel {role.value} não gera IDs automaticamente")
    highest = max(
        (_suffix_number(i, prefix) for i in existing_ids if i.startswith(prefix)),
        default=0,
    )
    return f"{prefix}{str(highest + 1).zfill(ID_WIDTH)}"
