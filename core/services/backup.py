# Nombre de archivo: backup.py
# Ubicación de archivo: core/services/backup.py
# Descripción: Respaldo completo del sistema en JSON y restauración por bloques

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Type

from pydantic import BaseModel, ValidationError

from core.directory.schemas import GeoCluster, Occurrence, ReasonCategory, TeamMember, User
from core.repositories.directory import DirectoryRepository, to_record
from core.repositories.store import Collection

logger = logging.getLogger(__name__)

BACKUP_VERSION = "2.0"
GENERATED_BY = "Admin Panel"
RESTORE_CHUNK_SIZE = 100


@dataclass
class RestoreResult:
    success: bool
    errors: List[str] = field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        return {"success": self.success, "errors": list(self.errors)}


def export_system_data(repository: DirectoryRepository) -> Dict[str, Any]:
    """Snapshot serializable de equipo, perfiles, ocurrencias y configuración."""
    return {
        "metadata": {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": BACKUP_VERSION,
            "generatedBy": GENERATED_BY,
        },
        "data": {
            "team": [to_record(m) for m in repository.list_members()],
            "users": [to_record(u) for u in repository.list_users()],
            "occurrences": [to_record(o) for o in repository.list_occurrences()],
            "configs": {
                "reasons": [to_record(r) for r in repository.get_reasons()],
                "geo": [to_record(g) for g in repository.get_geo()],
            },
        },
    }


def clear_all_data(repository: DirectoryRepository) -> None:
    """Borra ocurrencias y equipo; los perfiles se conservan."""
    occurrences = [o.id for o in repository.list_occurrences()]
    members = [m.id for m in repository.list_members()]
    repository.delete(Collection.OCCURRENCES, occurrences)
    repository.delete(Collection.TEAM_MEMBERS, members)
    logger.warning("action=clear_all_data occurrences=%s members=%s", len(occurrences), len(members))


def _parse(items: List[Any], model: Type[BaseModel], label: str) -> List[BaseModel]:
    try:
        return [model.model_validate(item) for item in items or []]
    except ValidationError as exc:
        raise ValueError(f"{label} inválido no backup: {exc.error_count()} erro(s)") from exc


def restore_system_data(
    repository: DirectoryRepository,
    backup: Dict[str, Any],
    clear_first: bool = False,
) -> RestoreResult:
    data = backup.get("data") if isinstance(backup, dict) else None
    if not isinstance(data, dict) or data.get("occurrences") is None or data.get("team") is None:
        return RestoreResult(success=False, errors=["Arquivo de backup inválido ou corrompido."])

    try:
        team = _parse(data.get("team"), TeamMember, "Equipe")
        users = _parse(data.get("users"), User, "Perfis")
        occurrences = _parse(data.get("occurrences"), Occurrence, "Ocorrências")
        configs = data.get("configs") or {}
        reasons = _parse(configs.get("reasons"), ReasonCategory, "Motivos")
        geo = _parse(configs.get("geo"), GeoCluster, "Geografia")
    except ValueError as exc:
        return RestoreResult(success=False, errors=[str(exc)])

    errors: List[str] = []
    if clear_first:
        clear_all_data(repository)
    if configs.get("reasons") is not None:
        repository.save_reasons(reasons)
    if configs.get("geo") is not None:
        repository.save_geo(geo)

    for collection, items, label in (
        (Collection.TEAM_MEMBERS, team, "Equipe"),
        (Collection.PROFILES, users, "Perfis"),
    ):
        if not items:
            continue
        try:
            repository.save(collection, items)
        except Exception as exc:  # noqa: BLE001
            logger.error("action=restore collection=%s error=%s", collection.value, exc)
            errors.append(f"Erro ao restaurar {label}: {exc}")

    for offset in range(0, len(occurrences), RESTORE_CHUNK_SIZE):
        chunk = occurrences[offset:offset + RESTORE_CHUNK_SIZE]
        try:
            repository.save(Collection.OCCURRENCES, chunk)
        except Exception as exc:  # noqa: BLE001
            logger.error("action=restore collection=occurrences offset=%s error=%s", offset, exc)
            errors.append(f"Erro ao restaurar Ocorrências (Lote {offset}): {exc}")

    logger.info(
        "action=restore team=%s users=%s occurrences=%s errors=%s",
        len(team),
        len(users),
        len(occurrences),
        len(errors),
    )
    return RestoreResult(success=not errors, errors=errors)
