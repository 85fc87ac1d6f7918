"""
# Nombre de archivo: team.py
# Ubicación de archivo: api/api_app/routes/team.py
# Descripción: Endpoints de equipo (listado, errores de jerarquía, subordinados, alta/edición y baja)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from api.app.deps import get_repository
from core.directory.hierarchy import count_hierarchy_errors, find_hierarchy_issues, subordinate_ids
from core.directory.schemas import TeamMember, TeamMemberRole
from core.repositories.directory import DirectoryRepository
from core.services.team import MemberConflictError, remove_member, save_member


router = APIRouter(prefix="/api/team", tags=["team"])
logger = logging.getLogger(__name__)


class MemberPayload(BaseModel):
    """Alta/edición manual; ``id`` vacío en gestores genera uno nuevo."""

    id: str = ""
    name: str
    role: TeamMemberRole
    reports_to_id: Optional[str] = None
    supervisor_id: Optional[str] = None
    coordenador_id: Optional[str] = None
    gerente_id: Optional[str] = None
    controlador_id: Optional[str] = None
    cluster: Optional[str] = None
    filial: Optional[str] = None
    segment: Optional[str] = None
    active: bool = True
    original_id: Optional[str] = None


@router.get("", response_model=List[TeamMember])
def list_team(
    role: Optional[TeamMemberRole] = Query(None),
    repository: DirectoryRepository = Depends(get_repository),
) -> List[TeamMember]:
    members = repository.list_members()
    if role is not None:
        members = [m for m in members if m.role is role]
    return members


@router.get("/hierarchy-errors")
def hierarchy_errors(repository: DirectoryRepository = Depends(get_repository)) -> dict:
    members = repository.list_members()
    issues = find_hierarchy_issues(members)
    return {
        "count": count_hierarchy_errors(members),
        "issues": [issue.to_dict() for issue in issues],
    }


@router.get("/{member_id}/subordinates")
def subordinates(member_id: str, repository: DirectoryRepository = Depends(get_repository)) -> dict:
    members = repository.list_members()
    if not any(m.id == member_id for m in members):
        raise HTTPException(status_code=404, detail="Integrante não encontrado")
    return {"id": member_id, "subordinates": subordinate_ids(members, member_id)}


@router.put("")
def upsert_member(payload: MemberPayload, repository: DirectoryRepository = Depends(get_repository)) -> dict:
    data = payload.model_dump(exclude={"original_id"})
    data["segment"] = (payload.segment or "").upper() or None
    if data["segment"] not in (None, "BA", "TT"):
        data["segment"] = None
    try:
        result = save_member(repository, TeamMember(**data), original_id=payload.original_id)
    except MemberConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return result.to_response()


@router.delete("/{member_id}")
def delete_member(member_id: str, repository: DirectoryRepository = Depends(get_repository)) -> dict:
    try:
        orphans = remove_member(repository, member_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"status": "ok", "orphans": orphans}
