# Nombre de archivo: store.py
# Ubicación de archivo: core/repositories/store.py
# Descripción: Contrato del almacén de registros por clave y almacén en memoria

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Protocol, Set

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class Collection(str, Enum):
    TEAM_MEMBERS = "team_members"
    PROFILES = "profiles"
    OCCURRENCES = "occurrences"
    APP_CONFIG = "app_config"


# Campo clave de cada colección
KEY_FIELDS = {
    Collection.TEAM_MEMBERS: "id",
    Collection.PROFILES: "id",
    Collection.OCCURRENCES: "id",
    Collection.APP_CONFIG: "key",
}


class StoreError(RuntimeError):
    """El backend rechazó la operación."""


class RecordStore(Protocol):
    """Contrato mínimo del backend: lectura completa, upsert y borrado por clave."""

    def read_all(self, collection: Collection) -> List[Record]:
        """Devuelve todos los registros de la colección."""

    def upsert(self, collection: Collection, records: List[Record]) -> None:
        """Inserta o reemplaza registros completos por clave."""

    def delete(self, collection: Collection, keys: List[str]) -> None:
        """Elimina registros por clave (las claves inexistentes se ignoran)."""


@dataclass
class InMemoryRecordStore(RecordStore):
    """Almacén en memoria para desarrollo y pruebas.

    ``fail_on`` permite simular rechazos del backend: cada entrada es
    ``(colección, clave)`` y cualquier upsert que la incluya falla completo.
    """

    data: Dict[Collection, Dict[str, Record]] = field(default_factory=dict)
    fail_on: Set[tuple] = field(default_factory=set)
    fail_reads: bool = False

    def _bucket(self, collection: Collection) -> Dict[str, Record]:
        return self.data.setdefault(Collection(collection), {})

    def read_all(self, collection: Collection) -> List[Record]:
        if self.fail_reads:
            raise StoreError("backend indisponível")
        return [copy.deepcopy(r) for r in self._bucket(collection).values()]

    def upsert(self, collection: Collection, records: List[Record]) -> None:
        key_field = KEY_FIELDS[Collection(collection)]
        for record in records:
            if (Collection(collection), record.get(key_field)) in self.fail_on:
                raise StoreError(f"registro {record.get(key_field)} rejeitado")
        bucket = self._bucket(collection)
        for record in records:
            bucket[str(record[key_field])] = copy.deepcopy(record)

    def delete(self, collection: Collection, keys: List[str]) -> None:
        bucket = self._bucket(collection)
        for key in keys:
            bucket.pop(key, None)

    def seed(self, collection: Collection, records: Iterable[Record]) -> None:
        self.upsert(collection, list(records))
        logger.debug("action=store_seed collection=%s", Collection(collection).value)
