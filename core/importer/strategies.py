# Nombre de archivo: strategies.py
# Ubicación de archivo: core/importer/strategies.py
# Descripción: Estrategias por tipo de entidad (técnicos, gestores, ocurrencias, usuarios) para el motor

"""Mapeo de columnas, validación y resolución por tipo de planilla.

El motor genérico (``core.importer.engine``) recorre las filas y delega en
una estrategia la construcción de cada entidad. Las estrategias leen y
consultan la copia de trabajo del lote pero nunca la modifican: el motor es
quien inserta la entidad construida.
"""

from __future__ import annotations

import logging
import re
import uuid
from enum import Enum
from typing import Dict, List, Optional

import pandas as pd
from pydantic import BaseModel

from core.directory.geo import DEFAULT_CLUSTER
from core.directory.schemas import (
    EscalationLevel,
    GeoLocation,
    Occurrence,
    OccurrenceStatus,
    Segment,
    TeamMember,
    TeamMemberRole,
    User,
    UserRole,
)
from core.importer.allocator import allocate
from core.importer.errors import AmbiguousReferenceError, RowError
from core.importer.resolver import resolve, resolve_member, resolve_user
from core.importer.working_set import WorkingSet
from core.parsers.tabular import ParsedRow
from core.repositories.store import Collection
from core.services.occurrences import (
    ACTION_IMPORTACAO,
    SYSTEM_ACTOR,
    InvalidTransitionError,
    change_status,
    new_audit_entry,
)

logger = logging.getLogger(__name__)

REGISTERED_BY_FALLBACK = "IMPORTACAO"
OCCURRENCE_NAMESPACE = uuid.UUID("6f1c3a52-8d0e-4c1b-9a57-0c3e2b7d9f10")
_DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d")
_LOCATION_SPLIT = re.compile(r"[\s|,]+")
_ID_HEADERS = {"id", "código", "codigo", "cod", "matrícula", "matricula"}


class ImportKind(str, Enum):
    TECHNICIANS = "technicians"
    MANAGERS = "managers"
    OCCURRENCES = "occurrences"
    USERS = "users"


class ImportMode(str, Enum):
    MERGE = "MERGE"
    REPLACE = "REPLACE"


def _is_inactive(label: str) -> bool:
    return label.strip().casefold().startswith("inativ")


def _same(a: str | None, b: str | None) -> bool:
    return (a or "").strip().casefold() == (b or "").strip().casefold()


class ImportStrategy:
    """Base de las estrategias; cada subclase define columnas y reglas."""

    kind: ImportKind
    collection: Collection
    min_columns: int = 3
    supports_replace: bool = True

    def prepare(self, header: List[str]) -> None:
        """Ajusta la estrategia al encabezado del archivo (por defecto no hace nada)."""

    def entities(self, working: WorkingSet) -> Dict[str, BaseModel]:
        raise NotImplementedError

    def in_role_class(self, entity: BaseModel) -> bool:
        return True

    def build(self, row: ParsedRow, working: WorkingSet) -> BaseModel:
        raise NotImplementedError


# ================================
# Técnicos
# ================================
class TechnicianStrategy(ImportStrategy):
    """``ID;Nome;Supervisor;Coordenador;Gerente;Controlador;Cluster;Filial;Segmento[;Status]``."""

    kind = ImportKind.TECHNICIANS
    collection = Collection.TEAM_MEMBERS

    def entities(self, working: WorkingSet) -> Dict[str, BaseModel]:
        return working.members

    def in_role_class(self, entity: BaseModel) -> bool:
        return entity.role is TeamMemberRole.TECNICO

    def build(self, row: ParsedRow, working: WorkingSet) -> TeamMember:
        member_id, name = row.get(0), row.get(1)
        if not member_id or not name:
            raise RowError("Dados obrigatórios ausentes (Nome e ID)")
        current = working.members.get(member_id)
        if current is not None and current.role is not TeamMemberRole.TECNICO:
            raise RowError(f"ID {member_id} já pertence a um {current.role.value}")

        cluster = row.get(6) or None
        members = list(working.members.values())
        status = row.get(9)
        return TeamMember(
            id=member_id,
            name=name,
            role=TeamMemberRole.TECNICO,
            supervisor_id=resolve(row.get(2), TeamMemberRole.SUPERVISOR, members, cluster),
            coordenador_id=resolve(row.get(3), TeamMemberRole.COORDENADOR, members, cluster),
            gerente_id=resolve(row.get(4), TeamMemberRole.GERENTE, members, cluster),
            controlador_id=row.get(5) or None,
            cluster=cluster,
            filial=row.get(7) or None,
            segment=Segment.normalize(row.get(8)),
            active=not (status and _is_inactive(status)),
        )


# ================================
# Gestores
# ================================
class ManagerStrategy(ImportStrategy):
    """Gestores en dos formatos.

    Con ID: ``ID;Nome;Cargo;Superior Imediato;Cluster;Filial[;Status]``.
    Sin ID: ``Nome;Cargo;Superior Imediato;Cluster;Filial`` (IDs generados).
    El formato se toma del encabezado; si no es concluyente, una fila con 6 o
    más columnas se interpreta con ID.
    """

    kind = ImportKind.MANAGERS
    collection = Collection.TEAM_MEMBERS

    def __init__(self) -> None:
        self._id_first: Optional[bool] = None

    def prepare(self, header: List[str]) -> None:
        first = header[0].strip().casefold() if header else ""
        if first in _ID_HEADERS:
            self._id_first = True
        elif first.startswith("nome"):
            self._id_first = False
        else:
            self._id_first = None

    def entities(self, working: WorkingSet) -> Dict[str, BaseModel]:
        return working.members

    def in_role_class(self, entity: BaseModel) -> bool:
        return entity.role.is_manager

    def _columns(self, row: ParsedRow) -> List[str]:
        id_first = self._id_first if self._id_first is not None else len(row) >= 6
        if id_first:
            return [row.get(i) for i in range(7)]
        return [""] + [row.get(i) for i in range(5)] + [""]

    @staticmethod
    def _superior(
        name: str, role: TeamMemberRole, members: List[TeamMember], cluster: Optional[str]
    ) -> Optional[str]:
        # Primero el nivel inmediato superior, luego los siguientes
        target = role.parent
        while target is not None:
            found = resolve(name, target, members, cluster)
            if found:
                return found
            target = target.parent
        return None

    def build(self, row: ParsedRow, working: WorkingSet) -> TeamMember:
        member_id, name, role_label, superior, cluster, filial, status = self._columns(row)
        if not name:
            raise RowError("Dados obrigatórios ausentes (Nome)")
        role = TeamMemberRole.from_label(role_label) if role_label else TeamMemberRole.SUPERVISOR
        if role is None or not role.is_manager:
            raise RowError(f"Cargo inválido: {role_label}")

        members = list(working.members.values())
        cluster = cluster or None
        reports_to = None
        if role.parent is not None and superior:
            reports_to = self._superior(superior, role, members, cluster)

        if not member_id:
            # Los retirados por REPLACE conservan su ID si el nombre vuelve en el archivo
            known = {**working.retired, **working.members}
            same = [
                m for m in known.values()
                if m.role is role and _same(m.name, name) and _same(m.cluster, cluster)
            ]
            if len(same) > 1:
                raise AmbiguousReferenceError(name, role.value, [m.id for m in same])
            member_id = same[0].id if same else allocate(role, known.keys())

        current = working.members.get(member_id)
        if current is not None and not current.role.is_manager:
            raise RowError(f"ID {member_id} já pertence a um {current.role.value}")

        return TeamMember(
            id=member_id,
            name=name,
            role=role,
            reports_to_id=reports_to if reports_to != member_id else None,
            cluster=cluster,
            filial=filial or None,
            active=not (status and _is_inactive(status)),
        )


# ================================
# Ocurrencias
# ================================
def parse_date(raw: str) -> Optional[str]:
    """Convierte DD/MM/AAAA (o AAAA-MM-DD) a ISO; None si la fecha no existe."""
    for fmt in _DATE_FORMATS:
        parsed = pd.to_datetime(raw.strip(), format=fmt, errors="coerce")
        if not pd.isna(parsed):
            return parsed.date().isoformat()
    return None


def parse_location(raw: str) -> Optional[GeoLocation]:
    parts = [p for p in _LOCATION_SPLIT.split(raw.strip()) if p]
    if len(parts) != 2:
        return None
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return GeoLocation(lat=lat, lng=lng)


def occurrence_id(technician_id: str, date: str, time: str, category: str, reason: str) -> str:
    """ID determinístico para que reimportar la misma fila actualice en vez de duplicar."""
    key = "|".join((technician_id, date, time, category, reason))
    return str(uuid.uuid5(OCCURRENCE_NAMESPACE, key))


class OccurrenceStrategy(ImportStrategy):
    """``Data;Hora;Técnico;Registrado Por;Categoria;Motivo;Descrição;Status;Recorrência;Cluster;Filial;Setor;Localização;Feedback``."""

    kind = ImportKind.OCCURRENCES
    collection = Collection.OCCURRENCES
    min_columns = 5

    def entities(self, working: WorkingSet) -> Dict[str, BaseModel]:
        return working.occurrences

    def _registered_by(self, raw: str, working: WorkingSet) -> str:
        # ID exacto primero: la exportación escribe el ID, no el nombre
        if not raw or raw == REGISTERED_BY_FALLBACK:
            return REGISTERED_BY_FALLBACK
        if raw in working.users or raw in working.members:
            return raw
        found = resolve_user(raw, working.users.values())
        if found:
            return found
        found = resolve_member(raw, working.members.values())
        return found or REGISTERED_BY_FALLBACK

    def build(self, row: ParsedRow, working: WorkingSet) -> Occurrence:
        date_raw, time_, tech_name = row.get(0), row.get(1), row.get(2)
        category, reason = row.get(4), row.get(5)
        if not date_raw or not tech_name or not category:
            raise RowError("Dados obrigatórios ausentes (Data, Técnico ou Categoria)")
        date = parse_date(date_raw)
        if date is None:
            raise RowError(f"Data inválida '{date_raw}' (use DD/MM/AAAA)")

        cluster, branch = row.get(9) or None, row.get(10) or None
        tech_id = resolve(tech_name, TeamMemberRole.TECNICO, working.members.values(), cluster)
        if tech_id is None:
            raise RowError(f"Técnico '{tech_name}' não encontrado")
        technician = working.members[tech_id]
        if cluster is None:
            cluster = working.geo.cluster_for_branch(branch) or DEFAULT_CLUSTER

        status = OccurrenceStatus.parse(row.get(7)) or OccurrenceStatus.REGISTRADA
        fields = {
            "user_id": tech_id,
            "user_name": technician.name,
            "registered_by_user_id": self._registered_by(row.get(3), working),
            "date": date,
            "time": time_,
            "category": category,
            "reason": reason,
            "description": row.get(6),
            "escalation_level": EscalationLevel.parse(row.get(8)) or EscalationLevel.NONE,
            "cluster": cluster,
            "branch": branch,
            "sector": row.get(11) or None,
            "location": parse_location(row.get(12)),
            "feedback": row.get(13) or None,
        }
        occ_id = occurrence_id(tech_id, date, time_, category, reason)
        current = working.occurrences.get(occ_id)
        if current is None:
            occurrence = Occurrence(id=occ_id, status=status, **fields)
            occurrence.audit_trail.append(
                new_audit_entry(ACTION_IMPORTACAO, SYSTEM_ACTOR, "Importado via CSV")
            )
            return occurrence
        return self._update(current, fields, status)

    @staticmethod
    def _update(current: Occurrence, fields: Dict[str, object], status: OccurrenceStatus) -> Occurrence:
        changed = {k: v for k, v in fields.items() if getattr(current, k) != v}
        if not changed and status is current.status:
            return current
        if current.status.is_terminal:
            raise RowError(
                f"Ocorrência {current.id} está {current.status.value} e não pode ser alterada"
            )
        updated = current.model_copy(deep=True)
        if changed:
            for name, value in changed.items():
                setattr(updated, name, value)
            updated.audit_trail.append(
                new_audit_entry(
                    ACTION_IMPORTACAO,
                    SYSTEM_ACTOR,
                    f"Atualizado via CSV ({', '.join(sorted(changed))})",
                )
            )
        if status is not updated.status:
            try:
                change_status(updated, status, SYSTEM_ACTOR)
            except InvalidTransitionError as exc:
                raise RowError(str(exc)) from exc
        return updated


# ================================
# Usuarios
# ================================
def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split("|") if item.strip()]


class UserStrategy(ImportStrategy):
    """``Nome;ID Login;Senha;Email;Apelido;Perfil;Clusters;Filiais`` (la contraseña se ignora)."""

    kind = ImportKind.USERS
    collection = Collection.PROFILES
    min_columns = 2
    supports_replace = False

    def entities(self, working: WorkingSet) -> Dict[str, BaseModel]:
        return working.users

    def build(self, row: ParsedRow, working: WorkingSet) -> User:
        name, login = row.get(0), row.get(1)
        if not name or not login:
            raise RowError("Dados obrigatórios ausentes (Nome e ID)")
        nickname = row.get(4) or name.split()[0]
        role = UserRole.ADMIN if row.get(5).strip().upper() == UserRole.ADMIN.value else UserRole.CONTROLADOR
        return User(
            id=login,
            name=name,
            nickname=nickname,
            email=row.get(3) or None,
            role=role,
            allowed_clusters=[c.upper() for c in _split_list(row.get(6))],
            allowed_branches=_split_list(row.get(7)),
            team_member_id=login if login in working.members else None,
        )


STRATEGIES = {
    ImportKind.TECHNICIANS: TechnicianStrategy,
    ImportKind.MANAGERS: ManagerStrategy,
    ImportKind.OCCURRENCES: OccurrenceStrategy,
    ImportKind.USERS: UserStrategy,
}


def strategy_for(kind: ImportKind | str) -> ImportStrategy:
    """Instancia nueva por lote (las estrategias guardan estado del encabezado)."""
    return STRATEGIES[ImportKind(kind)]()
