"""
# Nombre de archivo: config.py
# Ubicación de archivo: api/api_app/routes/config.py
# Descripción: Endpoints de configuración (árbol geográfico y árbol de motivos)
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from api.app.deps import get_repository
from core.directory.geo import GeoConflictError, GeoTree, validate_geo
from core.directory.reasons import ReasonConflictError, ReasonTree, validate_reasons
from core.directory.schemas import GeoCluster, GeoMaps, ReasonCategory
from core.repositories.directory import DirectoryRepository


router = APIRouter(prefix="/api/config", tags=["config"])
logger = logging.getLogger(__name__)


@router.get("/geo", response_model=List[GeoCluster])
def get_geo(repository: DirectoryRepository = Depends(get_repository)) -> List[GeoCluster]:
    return repository.get_geo()


@router.put("/geo", response_model=List[GeoCluster])
def put_geo(clusters: List[GeoCluster], repository: DirectoryRepository = Depends(get_repository)) -> List[GeoCluster]:
    try:
        validated = validate_geo(clusters)
    except GeoConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    repository.save_geo(validated)
    logger.info("action=geo_save clusters=%s", len(validated))
    return validated


@router.get("/geo/maps", response_model=GeoMaps)
def get_geo_maps(repository: DirectoryRepository = Depends(get_repository)) -> GeoMaps:
    return GeoTree(repository.get_geo()).maps()


@router.get("/reasons", response_model=List[ReasonCategory])
def get_reasons(repository: DirectoryRepository = Depends(get_repository)) -> List[ReasonCategory]:
    return repository.get_reasons()


@router.put("/reasons", response_model=List[ReasonCategory])
def put_reasons(
    categories: List[ReasonCategory],
    repository: DirectoryRepository = Depends(get_repository),
) -> List[ReasonCategory]:
    try:
        validated = validate_reasons(categories)
    except ReasonConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    repository.save_reasons(validated)
    return validated


@router.post("/reasons/categories", response_model=List[ReasonCategory], status_code=201)
def add_reason_category(repository: DirectoryRepository = Depends(get_repository)) -> List[ReasonCategory]:
    tree = ReasonTree(repository.get_reasons())
    tree.add_category()
    repository.save_reasons(tree.categories)
    return tree.categories
