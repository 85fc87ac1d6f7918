"""
# Nombre de archivo: exports.py
# Ubicación de archivo: api/api_app/routes/exports.py
# Descripción: Descarga de exportaciones CSV (con BOM), plantillas de importación y reporte XLSX
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from api.app.deps import get_repository
from core.importer import export
from core.importer.strategies import ImportKind
from core.repositories.directory import DirectoryRepository


router = APIRouter(prefix="/api/exports", tags=["exports"])
logger = logging.getLogger(__name__)

_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


_EXPORTERS: Dict[str, Callable[[DirectoryRepository], str]] = {
    "technicians": lambda repo: export.export_technicians(repo.list_members()),
    "managers": lambda repo: export.export_managers(repo.list_members()),
    "users": lambda repo: export.export_users(repo.list_users()),
    "geo": lambda repo: export.export_geo(repo.get_geo()),
    "reasons": lambda repo: export.export_reasons(repo.get_reasons()),
}


@router.get("/occurrences.xlsx")
def export_occurrences_xlsx(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    repository: DirectoryRepository = Depends(get_repository),
) -> Response:
    payload = export.export_occurrences_xlsx(repository.list_occurrences(), start, end)
    return Response(
        content=payload,
        media_type=_XLSX,
        headers={"Content-Disposition": 'attachment; filename="relatorio_ocorrencias.xlsx"'},
    )


@router.get("/occurrences")
def export_occurrences_csv(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    repository: DirectoryRepository = Depends(get_repository),
) -> Response:
    content = export.export_occurrences(repository.list_occurrences(), start, end)
    return _csv_response(content, f"ocorrencias_{date.today().isoformat()}.csv")


@router.get("/{kind}/template")
def download_template(kind: ImportKind) -> Response:
    return _csv_response(export.template_for(kind), f"modelo_importacao_{kind.value}.csv")


@router.get("/{kind}")
def export_kind(kind: str, repository: DirectoryRepository = Depends(get_repository)) -> Response:
    exporter = _EXPORTERS.get(kind)
    if exporter is None:
        raise HTTPException(status_code=404, detail=f"Exportação desconhecida: {kind}")
    content = exporter(repository)
    logger.info("action=export kind=%s bytes=%s", kind, len(content))
    return _csv_response(content, f"{kind}_{date.today().isoformat()}.csv")
