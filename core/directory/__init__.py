# Nombre de archivo: __init__.py
# Ubicación de archivo: core/directory/__init__.py
# Descripción: Paquete del directorio operativo (equipo, geografía, motivos)

"""Modelos y editores del directorio jerárquico."""

from .schemas import (
    EscalationLevel,
    Occurrence,
    OccurrenceStatus,
    TeamMember,
    TeamMemberRole,
    User,
    UserRole,
)

__all__ = [
    "EscalationLevel",
    "Occurrence",
    "OccurrenceStatus",
    "TeamMember",
    "TeamMemberRole",
    "User",
    "UserRole",
]
