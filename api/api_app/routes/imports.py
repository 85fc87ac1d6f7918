"""
# Nombre de archivo: imports.py
# Ubicación de archivo: api/api_app/routes/imports.py
# Descripción: Endpoints de importación masiva (técnicos, gestores, ocurrencias, usuarios, geografía)
"""

from __future__ import annotations

import io
import logging
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from api.app.deps import get_metrics, get_repository
from core.config import get_settings
from core.directory.geo import GeoTree
from core.importer.engine import decode_content, run_import, run_import_bytes
from core.importer.errors import FatalImportError
from core.importer.report import BatchReport
from core.importer.strategies import ImportKind, ImportMode
from core.metrics import Metrics
from core.repositories.directory import DirectoryRepository


router = APIRouter(prefix="/api/imports", tags=["imports"])
logger = logging.getLogger(__name__)

_TEXT_SUFFIXES = (".csv", ".txt")
_EXCEL_SUFFIXES = (".xlsx", ".xlsm")


def _excel_to_text(content: bytes) -> str:
    df = pd.read_excel(io.BytesIO(content), engine="openpyxl", dtype=str, keep_default_na=False)
    return df.to_csv(sep=";", index=False)


async def _read_upload(file: UploadFile) -> tuple[str, bytes]:
    if not file.filename:
        raise HTTPException(status_code=400, detail="Falta nome de arquivo")
    name = file.filename.lower()
    if not name.endswith(_TEXT_SUFFIXES + _EXCEL_SUFFIXES):
        raise HTTPException(status_code=415, detail="Formato não suportado (use .csv ou .xlsx)")
    return name, await file.read()


@router.post("/geo")
async def import_geo(
    file: UploadFile = File(..., description="CSV Cluster;Filial;Setor"),
    repository: DirectoryRepository = Depends(get_repository),
) -> dict:
    _, content = await _read_upload(file)
    try:
        text = decode_content(content)
    except FatalImportError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    tree = GeoTree(repository.get_geo())
    result = tree.import_rows(text)
    if result.total:
        repository.save_geo(tree.clusters)
    return result.to_response()


@router.post("/{kind}")
async def import_file(
    kind: ImportKind,
    file: UploadFile = File(..., description="Planilha CSV (';' ou ',') ou XLSX"),
    mode: Optional[ImportMode] = Query(None, description="MERGE (padrão) ou REPLACE"),
    repository: DirectoryRepository = Depends(get_repository),
    metrics: Metrics = Depends(get_metrics),
) -> dict:
    settings = get_settings()
    effective_mode = mode or ImportMode(settings.imports.default_mode)
    name, content = await _read_upload(file)

    if name.endswith(_EXCEL_SUFFIXES) and content:
        try:
            text = _excel_to_text(content)
        except Exception as exc:  # noqa: BLE001
            logger.exception("action=import_read kind=%s error=%s", kind.value, exc)
            report = BatchReport.fatal("Conteúdo ilegível (planilha inválida)")
        else:
            report = run_import(text, kind, effective_mode, repository, settings)
    else:
        report = run_import_bytes(content, kind, effective_mode, repository, settings)

    metrics.record_import(kind.value, report.new, report.updated, len(report.errors), report.failed_chunks)
    logger.info(
        "action=import_file kind=%s mode=%s file=%s total=%s errors=%s",
        kind.value,
        effective_mode.value,
        name,
        report.total,
        len(report.errors),
    )
    return report.to_response()
