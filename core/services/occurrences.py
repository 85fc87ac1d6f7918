# Nombre de archivo: occurrences.py
# Ubicación de archivo: core/services/occurrences.py
# Descripción: Máquina de estados de ocurrencias, auditoría y bloqueo de edición en estados terminales

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from core.directory.schemas import (
    AuditEntry,
    EscalationLevel,
    GeoLocation,
    Occurrence,
    OccurrenceStatus,
)

logger = logging.getLogger(__name__)

ACTION_REGISTRO = "REGISTRO"
ACTION_IMPORTACAO = "IMPORTACAO"
ACTION_ESCALONAMENTO = "ESCALONAMENTO"
ACTION_EDICAO = "EDICAO"
SYSTEM_ACTOR = "Sistema"

ALLOWED_TRANSITIONS = {
    OccurrenceStatus.REGISTRADA: {
        OccurrenceStatus.EM_ANALISE,
        OccurrenceStatus.CONCLUIDA,
        OccurrenceStatus.CANCELADA,
    },
    OccurrenceStatus.EM_ANALISE: {
        OccurrenceStatus.DEVOLVIDA,
        OccurrenceStatus.CONCLUIDA,
        OccurrenceStatus.CANCELADA,
    },
    OccurrenceStatus.DEVOLVIDA: {
        OccurrenceStatus.EM_ANALISE,
        OccurrenceStatus.CONCLUIDA,
        OccurrenceStatus.CANCELADA,
    },
    OccurrenceStatus.CONCLUIDA: set(),
    OccurrenceStatus.CANCELADA: set(),
}

# Campos que pueden cambiar vía edición mientras la ocurrencia no es terminal
EDITABLE_FIELDS = (
    "category",
    "reason",
    "description",
    "time",
    "cluster",
    "branch",
    "sector",
    "location",
)


class InvalidTransitionError(ValueError):
    pass


class OccurrenceLockedError(ValueError):
    """La ocurrencia está en estado terminal y no admite cambios."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_audit_entry(action: str, user: str, details: Optional[str] = None) -> AuditEntry:
    return AuditEntry(id=uuid.uuid4().hex, timestamp=_now(), action=action, user=user, details=details)


def _ensure_editable(occurrence: Occurrence) -> None:
    if occurrence.status.is_terminal:
        raise OccurrenceLockedError(
            f"Ocorrência {occurrence.id} está {occurrence.status.value} e não pode ser editada"
        )


def register_occurrence(
    *,
    user_id: str,
    user_name: str,
    registered_by: str,
    date: str,
    category: str,
    time: str = "",
    reason: str = "",
    description: str = "",
    escalation_level: EscalationLevel = EscalationLevel.NONE,
    cluster: str | None = None,
    branch: str | None = None,
    sector: str | None = None,
    location: GeoLocation | None = None,
) -> Occurrence:
    """Crea una ocurrencia REGISTRADA con su entrada de auditoría inicial."""
    occurrence = Occurrence(
        id=uuid.uuid4().hex,
        user_id=user_id,
        user_name=user_name,
        registered_by_user_id=registered_by,
        date=date,
        time=time,
        category=category,
        reason=reason,
        description=description,
        escalation_level=escalation_level,
        cluster=cluster,
        branch=branch,
        sector=sector,
        location=location,
    )
    occurrence.audit_trail.append(new_audit_entry(ACTION_REGISTRO, registered_by, "Ocorrência registrada"))
    logger.info("action=occurrence_register id=%s user_id=%s", occurrence.id, user_id)
    return occurrence


def can_transition(current: OccurrenceStatus, target: OccurrenceStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def change_status(
    occurrence: Occurrence,
    new_status: OccurrenceStatus,
    actor: str,
    reason: str | None = None,
) -> Occurrence:
    """Aplica una transición y agrega exactamente una entrada de auditoría."""
    _ensure_editable(occurrence)
    if not can_transition(occurrence.status, new_status):
        raise InvalidTransitionError(
            f"Transição inválida {occurrence.status.value} -> {new_status.value}"
        )
    details = f"Status alterado para {new_status.value}"
    if reason:
        details += f". Motivo: {reason}"
        occurrence.feedback = reason
    occurrence.status = new_status
    occurrence.audit_trail.append(new_audit_entry(new_status.value, actor, details))
    logger.info(
        "action=occurrence_status id=%s status=%s actor=%s",
        occurrence.id,
        new_status.value,
        actor,
    )
    return occurrence


def change_escalation(occurrence: Occurrence, level: EscalationLevel, actor: str) -> Occurrence:
    _ensure_editable(occurrence)
    if occurrence.escalation_level is level:
        return occurrence
    previous = occurrence.escalation_level
    occurrence.escalation_level = level
    occurrence.audit_trail.append(
        new_audit_entry(
            ACTION_ESCALONAMENTO,
            actor,
            f"Recorrência alterada de {previous.value} para {level.value}",
        )
    )
    return occurrence


def edit_occurrence(occurrence: Occurrence, changes: Mapping[str, Any], actor: str) -> Occurrence:
    """Edita campos permitidos; rechaza campos desconocidos y estados terminales."""
    _ensure_editable(occurrence)
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Campos não editáveis: {', '.join(sorted(unknown))}")
    applied: Dict[str, Any] = {}
    for name, value in changes.items():
        if name == "location" and isinstance(value, Mapping):
            value = GeoLocation(**value)
        if getattr(occurrence, name) != value:
            setattr(occurrence, name, value)
            applied[name] = value
    if applied:
        occurrence.audit_trail.append(
            new_audit_entry(ACTION_EDICAO, actor, f"Campos alterados: {', '.join(sorted(applied))}")
        )
    return occurrence


__all__ = [
    "ACTION_IMPORTACAO",
    "ALLOWED_TRANSITIONS",
    "EDITABLE_FIELDS",
    "InvalidTransitionError",
    "OccurrenceLockedError",
    "SYSTEM_ACTOR",
    "can_transition",
    "change_escalation",
    "change_status",
    "edit_occurrence",
    "new_audit_entry",
    "register_occurrence",
]
