# Nombre de archivo: schemas.py
# Ubicación de archivo: core/directory/schemas.py
# Descripción: Modelos Pydantic del directorio (equipo, usuarios, geografía, motivos y ocurrencias)

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class TeamMemberRole(str, Enum):
    """Niveles de la jerarquía operativa."""

    TECNICO = "Técnico"
    SUPERVISOR = "Supervisor"
    COORDENADOR = "Coordenador"
    GERENTE = "Gerente"

    @property
    def is_manager(self) -> bool:
        return self is not TeamMemberRole.TECNICO

    @property
    def parent(self) -> Optional["TeamMemberRole"]:
        """Nivel inmediatamente superior (None para Técnico y Gerente)."""
        return _PARENT_ROLE.get(self)

    @classmethod
    def from_label(cls, label: str | None) -> Optional["TeamMemberRole"]:
        if not label:
            return None
        wanted = label.strip().casefold()
        for role in cls:
            if role.value.casefold() == wanted or role.name.casefold() == wanted:
                return role
        return None


_PARENT_ROLE = {
    TeamMemberRole.SUPERVISOR: TeamMemberRole.COORDENADOR,
    TeamMemberRole.COORDENADOR: TeamMemberRole.GERENTE,
}


class Segment(str, Enum):
    BA = "BA"
    TT = "TT"

    @classmethod
    def normalize(cls, value: str | None) -> Optional["Segment"]:
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    CONTROLADOR = "CONTROLADOR"


class OccurrenceStatus(str, Enum):
    REGISTRADA = "REGISTRADA"
    EM_ANALISE = "EM_ANALISE"
    DEVOLVIDA = "DEVOLVIDA"
    CONCLUIDA = "CONCLUIDA"
    CANCELADA = "CANCELADA"

    @property
    def is_terminal(self) -> bool:
        return self in (OccurrenceStatus.CONCLUIDA, OccurrenceStatus.CANCELADA)

    @classmethod
    def parse(cls, value: str | None) -> Optional["OccurrenceStatus"]:
        if not value:
            return None
        key = value.strip().upper().replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return None


class EscalationLevel(str, Enum):
    """Nivel de recorrencia; el orden de declaración es el orden de severidad."""

    NONE = "Sem Recorrência"
    SUPERVISOR = "Supervisor"
    COORDENADOR = "Coordenador"
    GERENTE = "Gerente"
    DIRETOR = "Diretor"

    @property
    def rank(self) -> int:
        return list(EscalationLevel).index(self)

    @classmethod
    def parse(cls, value: str | None) -> Optional["EscalationLevel"]:
        if not value:
            return None
        wanted = value.strip().casefold()
        for level in cls:
            if level.value.casefold() == wanted or level.name.casefold() == wanted:
                return level
        return None


class TeamMember(BaseModel):
    """Integrante del equipo (técnico o gestor)."""

    id: str
    name: str
    role: TeamMemberRole
    reports_to_id: Optional[str] = None
    supervisor_id: Optional[str] = None
    coordenador_id: Optional[str] = None
    gerente_id: Optional[str] = None
    controlador_id: Optional[str] = None
    cluster: Optional[str] = None
    filial: Optional[str] = None
    segment: Optional[Segment] = None
    active: bool = True


class User(BaseModel):
    """Perfil de usuario del panel (sin credenciales)."""

    id: str
    name: str
    nickname: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.CONTROLADOR
    allowed_clusters: List[str] = Field(default_factory=list)
    allowed_branches: List[str] = Field(default_factory=list)
    team_member_id: Optional[str] = None


class GeoBranch(BaseModel):
    name: str
    sectors: List[str] = Field(default_factory=list)


class GeoCluster(BaseModel):
    name: str
    branches: List[GeoBranch] = Field(default_factory=list)


class ReasonCategory(BaseModel):
    category: str
    reasons: List[str] = Field(default_factory=list)


class GeoLocation(BaseModel):
    lat: float
    lng: float


class AuditEntry(BaseModel):
    id: str
    timestamp: str
    action: str
    user: str
    details: Optional[str] = None


class Occurrence(BaseModel):
    """Registro de ocurrencia asociado a un técnico."""

    id: str
    user_id: str
    user_name: str
    registered_by_user_id: str
    date: str
    time: str = ""
    category: str
    reason: str = ""
    description: str = ""
    status: OccurrenceStatus = OccurrenceStatus.REGISTRADA
    escalation_level: EscalationLevel = EscalationLevel.NONE
    cluster: Optional[str] = None
    branch: Optional[str] = None
    sector: Optional[str] = None
    location: Optional[GeoLocation] = None
    feedback: Optional[str] = None
    audit_trail: List[AuditEntry] = Field(default_factory=list)


class GeoMaps(BaseModel):
    """Vistas derivadas del árbol geográfico."""

    clusters: List[str]
    branch_to_cluster: Dict[str, str]
    branch_sectors: Dict[str, List[str]]


__all__ = [
    "AuditEntry",
    "EscalationLevel",
    "GeoBranch",
    "GeoCluster",
    "GeoLocation",
    "GeoMaps",
    "Occurrence",
    "OccurrenceStatus",
    "ReasonCategory",
    "Segment",
    "TeamMember",
    "TeamMemberRole",
    "User",
    "UserRole",
]
