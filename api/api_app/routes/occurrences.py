"""
# Nombre de archivo: occurrences.py
# Ubicación de archivo: api/api_app/routes/occurrences.py
# Descripción: Endpoints de ocurrencias (registro, cambio de estado, recorrencia y edición con bloqueo terminal)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from api.app.deps import get_repository
from core.directory.schemas import (
    EscalationLevel,
    GeoLocation,
    Occurrence,
    OccurrenceStatus,
    TeamMemberRole,
)
from core.repositories.directory import DirectoryRepository
from core.services.occurrences import (
    InvalidTransitionError,
    OccurrenceLockedError,
    change_escalation,
    change_status,
    edit_occurrence,
    register_occurrence,
)


router = APIRouter(prefix="/api/occurrences", tags=["occurrences"])
logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    user_id: str
    registered_by: str
    date: str
    category: str
    time: str = ""
    reason: str = ""
    description: str = ""
    escalation_level: EscalationLevel = EscalationLevel.NONE
    cluster: Optional[str] = None
    branch: Optional[str] = None
    sector: Optional[str] = None
    location: Optional[GeoLocation] = None


class StatusRequest(BaseModel):
    status: OccurrenceStatus
    actor: str
    reason: Optional[str] = None


class EscalationRequest(BaseModel):
    level: EscalationLevel
    actor: str


class EditRequest(BaseModel):
    actor: str
    changes: Dict[str, Any] = Field(default_factory=dict)


def _load(repository: DirectoryRepository, occurrence_id: str) -> Occurrence:
    occurrence = repository.get_occurrence(occurrence_id)
    if occurrence is None:
        raise HTTPException(status_code=404, detail="Ocorrência não encontrada")
    return occurrence


@router.get("", response_model=List[Occurrence])
def list_occurrences(
    status: Optional[OccurrenceStatus] = Query(None),
    user_id: Optional[str] = Query(None),
    repository: DirectoryRepository = Depends(get_repository),
) -> List[Occurrence]:
    items = repository.list_occurrences()
    if status is not None:
        items = [o for o in items if o.status is status]
    if user_id:
        items = [o for o in items if o.user_id == user_id]
    return items


@router.post("", response_model=Occurrence, status_code=201)
def create_occurrence(payload: RegisterRequest, repository: DirectoryRepository = Depends(get_repository)) -> Occurrence:
    technician = repository.get_member(payload.user_id)
    if technician is None or technician.role is not TeamMemberRole.TECNICO:
        raise HTTPException(status_code=400, detail="Técnico inválido")
    occurrence = register_occurrence(
        user_id=technician.id,
        user_name=technician.name,
        registered_by=payload.registered_by,
        date=payload.date,
        category=payload.category,
        time=payload.time,
        reason=payload.reason,
        description=payload.description,
        escalation_level=payload.escalation_level,
        cluster=payload.cluster or technician.cluster,
        branch=payload.branch or technician.filial,
        sector=payload.sector,
        location=payload.location,
    )
    repository.save_occurrence(occurrence)
    return occurrence


@router.post("/{occurrence_id}/status", response_model=Occurrence)
def update_status(
    occurrence_id: str,
    payload: StatusRequest,
    repository: DirectoryRepository = Depends(get_repository),
) -> Occurrence:
    occurrence = _load(repository, occurrence_id)
    try:
        change_status(occurrence, payload.status, payload.actor, payload.reason)
    except (OccurrenceLockedError, InvalidTransitionError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    repository.save_occurrence(occurrence)
    return occurrence


@router.post("/{occurrence_id}/escalation", response_model=Occurrence)
def update_escalation(
    occurrence_id: str,
    payload: EscalationRequest,
    repository: DirectoryRepository = Depends(get_repository),
) -> Occurrence:
    occurrence = _load(repository, occurrence_id)
    try:
        change_escalation(occurrence, payload.level, payload.actor)
    except OccurrenceLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    repository.save_occurrence(occurrence)
    return occurrence


@router.patch("/{occurrence_id}", response_model=Occurrence)
def patch_occurrence(
    occurrence_id: str,
    payload: EditRequest,
    repository: DirectoryRepository = Depends(get_repository),
) -> Occurrence:
    occurrence = _load(repository, occurrence_id)
    try:
        edit_occurrence(occurrence, payload.changes, payload.actor)
    except OccurrenceLockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    repository.save_occurrence(occurrence)
    return occurrence


@router.delete("/{occurrence_id}")
def delete_occurrence(occurrence_id: str, repository: DirectoryRepository = Depends(get_repository)) -> dict:
    occurrence = _load(repository, occurrence_id)
    repository.delete_occurrence(occurrence.id)
    logger.info("action=occurrence_delete id=%s", occurrence.id)
    return {"status": "ok"}
