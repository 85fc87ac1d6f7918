# Nombre de archivo: health.py
# Ubicación de archivo: api/api_app/routes/health.py
# Descripción: Health del servicio con resumen del directorio, versión de build y verificación de DB
from datetime import datetime, timezone
import os

from fastapi import APIRouter, Depends, Request

from api.app.db import db_health
from api.app.deps import get_repository
from core.config import get_settings
from core.directory.hierarchy import count_hierarchy_errors
from core.repositories.directory import DirectoryRepository

router = APIRouter()


@router.get("/health")
def health(repository: DirectoryRepository = Depends(get_repository)):
    members = repository.list_members()
    return {
        "status": "ok",
        "service": "api",
        "time": datetime.now(timezone.utc).isoformat(),
        "store": "sql" if get_settings().database.enabled else "memory",
        "directory": {
            "members": len(members),
            "active_members": sum(1 for m in members if m.active),
            "occurrences": len(repository.list_occurrences()),
            "hierarchy_errors": count_hierarchy_errors(members),
        },
    }


@router.get("/health/version")
def health_version(request: Request):
    # Variable de build primero; si no, la versión declarada en la app
    version = os.getenv("API_BUILD_VERSION") or os.getenv("APP_VERSION") or request.app.version
    return {"status": "ok", "service": "api", "version": version, "env": get_settings().env}


@router.get("/db-check")
def db_check():
    return db_health()
