# Nombre de archivo: directory.py
# Ubicación de archivo: db/models/directory.py
# Descripción: Modelos SQLAlchemy del directorio (equipo, perfiles, ocurrencias y configuración)

from __future__ import annotations

from sqlalchemy import JSON, Boolean, Column, Index, String, Text

from db.base import Base


class TeamMemberRecord(Base):
    """Integrante de la jerarquía (técnicos y gestores en la misma tabla)."""

    __tablename__ = "team_members"
    __table_args__ = (
        Index("ix_team_members_role", "role"),
        {"schema": "app"},
    )

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    role = Column(String(32), nullable=False)
    reports_to_id = Column(String(64), nullable=True)
    supervisor_id = Column(String(64), nullable=True)
    coordenador_id = Column(String(64), nullable=True)
    gerente_id = Column(String(64), nullable=True)
    controlador_id = Column(String(64), nullable=True)
    cluster = Column(String(128), nullable=True)
    filial = Column(String(128), nullable=True)
    segment = Column(String(8), nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class ProfileRecord(Base):
    """Perfil del panel; sin credenciales."""

    __tablename__ = "profiles"
    __table_args__ = {"schema": "app"}

    id = Column(String(128), primary_key=True)
    name = Column(String(255), nullable=False)
    nickname = Column(String(128), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(String(32), nullable=False, default="CONTROLADOR")
    allowed_clusters = Column(JSON, nullable=False, default=list)
    allowed_branches = Column(JSON, nullable=False, default=list)
    team_member_id = Column(String(64), nullable=True)


class OccurrenceRecord(Base):
    __tablename__ = "occurrences"
    __table_args__ = (
        Index("ix_occurrences_user_id", "user_id"),
        Index("ix_occurrences_date", "date"),
        {"schema": "app"},
    )

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False)
    user_name = Column(String(255), nullable=False)
    registered_by_user_id = Column(String(128), nullable=False)
    date = Column(String(10), nullable=False)
    time = Column(String(8), nullable=False, default="")
    category = Column(String(255), nullable=False)
    reason = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    status = Column(String(16), nullable=False, default="REGISTRADA")
    escalation_level = Column(String(32), nullable=False)
    cluster = Column(String(128), nullable=True)
    branch = Column(String(128), nullable=True)
    sector = Column(String(128), nullable=True)
    location = Column(JSON, nullable=True)
    feedback = Column(Text, nullable=True)
    audit_trail = Column(JSON, nullable=False, default=list)


class AppConfigRecord(Base):
    """Configuración clave/valor (árbol geográfico, árbol de motivos)."""

    __tablename__ = "app_config"
    __table_args__ = {"schema": "app"}

    key = Column(String(64), primary_key=True)
    value = Column(JSON, nullable=False)


__all__ = ["AppConfigRecord", "OccurrenceRecord", "ProfileRecord", "TeamMemberRecord"]
