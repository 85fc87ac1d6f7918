# Nombre de archivo: resolver.py
# Ubicación de archivo: core/importer/resolver.py
# Descripción: Resolución de nombres libres a IDs del directorio por (nombre, rol, cluster)

from __future__ import annotations

from typing import Iterable, List, Optional

from core.directory.schemas import TeamMember, TeamMemberRole, User
from core.importer.errors import AmbiguousReferenceError


def _norm(value: str | None) -> str:
    return (value or "").strip().casefold()


def resolve(
    name: str | None,
    role: TeamMemberRole,
    members: Iterable[TeamMember],
    cluster: str | None = None,
) -> Optional[str]:
    """Busca el ID del integrante ``role`` llamado ``name``.

    Coincidencia exacta sin distinguir mayúsculas. Con varios candidatos se
    desempata por cluster; si aún queda más de uno se lanza
    ``AmbiguousReferenceError``. Sin candidatos devuelve None.
    """
    wanted = _norm(name)
    if not wanted:
        return None
    candidates: List[TeamMember] = [
        m for m in members if m.role is role and _norm(m.name) == wanted
    ]
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0].id
    if cluster:
        narrowed = [m for m in candidates if _norm(m.cluster) == _norm(cluster)]
        if len(narrowed) == 1:
            return narrowed[0].id
        if narrowed:
            candidates = narrowed
    raise AmbiguousReferenceError(name.strip(), role.value, [m.id for m in candidates])


def resolve_user(name: str | None, users: Iterable[User]) -> Optional[str]:
    """Resuelve un usuario por nombre o apodo; con varios candidatos es ambiguo."""
    wanted = _norm(name)
    if not wanted:
        return None
    candidates = [u for u in users if wanted in (_norm(u.name), _norm(u.nickname))]
    if not candidates:
        return None
    if len(candidates) > 1:
        raise AmbiguousReferenceError(name.strip(), "Usuário", [u.id for u in candidates])
    return candidates[0].id


def resolve_member(name: str | None, members: Iterable[TeamMember]) -> Optional[str]:
    """Resuelve un integrante de cualquier rol por nombre; con varios candidatos es ambiguo."""
    wanted = _norm(name)
    if not wanted:
        return None
    candidates = [m for m in members if _norm(m.name) == wanted]
    if not candidates:
        return None
    if len(candidates) > 1:
        raise AmbiguousReferenceError(name.strip(), "Integrante", [m.id for m in candidates])
    return candidates[0].id
