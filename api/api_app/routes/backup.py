"""
# Nombre de archivo: backup.py
# Ubicación de archivo: api/api_app/routes/backup.py
# Descripción: Endpoints de respaldo JSON completo y restauración
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query

from api.app.deps import get_repository
from core.repositories.directory import DirectoryRepository
from core.services.backup import export_system_data, restore_system_data


router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.get("")
def download_backup(repository: DirectoryRepository = Depends(get_repository)) -> Dict[str, Any]:
    return export_system_data(repository)


@router.post("/restore")
def restore_backup(
    backup: Dict[str, Any] = Body(...),
    clear_first: bool = Query(False, description="Apaga ocorrências e equipe antes de restaurar"),
    repository: DirectoryRepository = Depends(get_repository),
) -> Dict[str, Any]:
    return restore_system_data(repository, backup, clear_first=clear_first).to_response()
