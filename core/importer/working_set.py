# Nombre de archivo: working_set.py
# Ubicación de archivo: core/importer/working_set.py
# Descripción: Snapshot del directorio y copia de trabajo aislada para cada lote de importación

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from pydantic import BaseModel

from core.directory.geo import GeoTree
from core.directory.schemas import GeoCluster, Occurrence, TeamMember, User


@dataclass
class DirectorySnapshot:
    """Estado persistido leído del almacén antes de un lote."""

    members: List[TeamMember] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    occurrences: List[Occurrence] = field(default_factory=list)
    geo: List[GeoCluster] = field(default_factory=list)


@dataclass
class WorkingSet:
    """Copia mutable propiedad de un único lote.

    Los diccionarios conservan el orden de inserción: primero el estado
    persistido y luego lo agregado por el lote, de modo que la resolución de
    nombres vea las filas anteriores del mismo archivo.

    ``retired`` guarda lo que REPLACE retiró de la copia: sus IDs siguen
    reservados y una fila sin ID con el mismo nombre los recupera.
    """

    members: Dict[str, TeamMember]
    users: Dict[str, User]
    occurrences: Dict[str, Occurrence]
    geo: GeoTree
    retired: Dict[str, BaseModel] = field(default_factory=dict)

    @classmethod
    def from_snapshot(cls, snapshot: DirectorySnapshot) -> "WorkingSet":
        return cls(
            members={m.id: m.model_copy(deep=True) for m in snapshot.members},
            users={u.id: u.model_copy(deep=True) for u in snapshot.users},
            occurrences={o.id: o.model_copy(deep=True) for o in snapshot.occurrences},
            geo=GeoTree(snapshot.geo),
        )
