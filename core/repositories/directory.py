# Nombre de archivo: directory.py
# Ubicación de archivo: core/repositories/directory.py
# Descripción: Repositorio tipado del directorio sobre un RecordStore (equipo, perfiles, ocurrencias, configuración)

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from core.directory.schemas import GeoCluster, Occurrence, ReasonCategory, TeamMember, User
from core.importer.working_set import DirectorySnapshot
from core.repositories.store import Collection, RecordStore

logger = logging.getLogger(__name__)

GEO_KEY = "geo_structure"
REASONS_KEY = "reasons_tree"

ModelT = TypeVar("ModelT", bound=BaseModel)

_MODELS = {
    Collection.TEAM_MEMBERS: TeamMember,
    Collection.PROFILES: User,
    Collection.OCCURRENCES: Occurrence,
}


def to_record(entity: BaseModel) -> dict:
    return entity.model_dump(mode="json")


class DirectoryRepository:
    """Traduce entidades Pydantic a registros planos del almacén y viceversa."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def _read(self, collection: Collection, model: Type[ModelT]) -> List[ModelT]:
        return [model.model_validate(record) for record in self.store.read_all(collection)]

    # ================================
    # Lectura
    # ================================
    def list_members(self) -> List[TeamMember]:
        return self._read(Collection.TEAM_MEMBERS, TeamMember)

    def list_users(self) -> List[User]:
        return self._read(Collection.PROFILES, User)

    def list_occurrences(self) -> List[Occurrence]:
        return self._read(Collection.OCCURRENCES, Occurrence)

    def get_occurrence(self, occurrence_id: str) -> Optional[Occurrence]:
        return next((o for o in self.list_occurrences() if o.id == occurrence_id), None)

    def get_member(self, member_id: str) -> Optional[TeamMember]:
        return next((m for m in self.list_members() if m.id == member_id), None)

    def _config(self, key: str) -> list:
        for record in self.store.read_all(Collection.APP_CONFIG):
            if record.get("key") == key:
                return record.get("value") or []
        return []

    def get_geo(self) -> List[GeoCluster]:
        return [GeoCluster.model_validate(item) for item in self._config(GEO_KEY)]

    def get_reasons(self) -> List[ReasonCategory]:
        return [ReasonCategory.model_validate(item) for item in self._config(REASONS_KEY)]

    def load_snapshot(self) -> DirectorySnapshot:
        """Estado completo usado como punto de partida de un lote."""
        snapshot = DirectorySnapshot(
            members=self.list_members(),
            users=self.list_users(),
            occurrences=self.list_occurrences(),
            geo=self.get_geo(),
        )
        logger.debug(
            "action=load_snapshot members=%s users=%s occurrences=%s clusters=%s",
            len(snapshot.members),
            len(snapshot.users),
            len(snapshot.occurrences),
            len(snapshot.geo),
        )
        return snapshot

    # ================================
    # Escritura
    # ================================
    def save(self, collection: Collection, entities: Sequence[BaseModel]) -> None:
        expected = _MODELS[Collection(collection)]
        for entity in entities:
            if not isinstance(entity, expected):
                raise TypeError(f"{type(entity).__name__} não pertence a {collection.value}")
        self.store.upsert(collection, [to_record(e) for e in entities])

    def delete(self, collection: Collection, keys: Iterable[str]) -> None:
        self.store.delete(collection, list(keys))

    def save_member(self, member: TeamMember) -> None:
        self.save(Collection.TEAM_MEMBERS, [member])

    def save_occurrence(self, occurrence: Occurrence) -> None:
        self.save(Collection.OCCURRENCES, [occurrence])

    def delete_occurrence(self, occurrence_id: str) -> None:
        self.store.delete(Collection.OCCURRENCES, [occurrence_id])

    def save_geo(self, clusters: Sequence[GeoCluster]) -> None:
        self.store.upsert(
            Collection.APP_CONFIG,
            [{"key": GEO_KEY, "value": [to_record(c) for c in clusters]}],
        )

    def save_reasons(self, categories: Sequence[ReasonCategory]) -> None:
        self.store.upsert(
            Collection.APP_CONFIG,
            [{"key": REASONS_KEY, "value": [to_record(c) for c in categories]}],
        )
