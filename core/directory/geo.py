# Nombre de archivo: geo.py
# Ubicación de archivo: core/directory/geo.py
# Descripción: Editor del árbol geográfico Cluster -> Filial -> Setor y vistas derivadas

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from core.directory.schemas import GeoBranch, GeoCluster, GeoMaps
from core.parsers.tabular import parse_table

logger = logging.getLogger(__name__)

DEFAULT_CLUSTER = "OUTROS"


class GeoConflictError(ValueError):
    """Nombre duplicado dentro del mismo nivel del árbol."""


class GeoNotFoundError(LookupError):
    """Nodo inexistente en el árbol geográfico."""


def _same(a: str, b: str) -> bool:
    return a.strip().casefold() == b.strip().casefold()


@dataclass
class GeoImportResult:
    total: int = 0
    clusters_added: int = 0
    branches_added: int = 0
    sectors_added: int = 0
    errors: List[str] = field(default_factory=list)

    def to_response(self) -> Dict[str, object]:
        return {
            "total": self.total,
            "clusters_added": self.clusters_added,
            "branches_added": self.branches_added,
            "sectors_added": self.sectors_added,
            "errors": list(self.errors),
        }


class GeoTree:
    """Árbol geográfico editable.

    Trabaja sobre una copia profunda de los clusters recibidos; el llamador
    persiste ``clusters`` cuando termina de editar.
    """

    def __init__(self, clusters: Iterable[GeoCluster] = ()) -> None:
        self.clusters: List[GeoCluster] = [c.model_copy(deep=True) for c in clusters]

    # ================================
    # Búsquedas
    # ================================
    def find_cluster(self, name: str) -> Optional[GeoCluster]:
        return next((c for c in self.clusters if _same(c.name, name)), None)

    def _cluster(self, name: str) -> GeoCluster:
        cluster = self.find_cluster(name)
        if cluster is None:
            raise GeoNotFoundError(f"Cluster {name} não encontrado")
        return cluster

    def _branch(self, cluster_name: str, branch_name: str) -> GeoBranch:
        cluster = self._cluster(cluster_name)
        branch = next((b for b in cluster.branches if _same(b.name, branch_name)), None)
        if branch is None:
            raise GeoNotFoundError(f"Filial {branch_name} não encontrada em {cluster.name}")
        return branch

    # ================================
    # Clusters
    # ================================
    def add_cluster(self, name: str) -> GeoCluster:
        clean = name.strip().upper()
        if not clean:
            raise ValueError("Nome do cluster vazio")
        if self.find_cluster(clean):
            raise GeoConflictError(f"Cluster {clean} já existe")
        cluster = GeoCluster(name=clean)
        self.clusters.append(cluster)
        return cluster

    def rename_cluster(self, old: str, new: str) -> None:
        cluster = self._cluster(old)
        clean = new.strip().upper()
        if not clean:
            raise ValueError("Nome do cluster vazio")
        other = self.find_cluster(clean)
        if other is not None and other is not cluster:
            raise GeoConflictError(f"Cluster {clean} já existe")
        cluster.name = clean

    def remove_cluster(self, name: str) -> None:
        """Elimina el cluster junto con sus filiales y setores."""
        cluster = self._cluster(name)
        self.clusters.remove(cluster)
        logger.info(
            "action=geo_remove_cluster cluster=%s branches=%s",
            cluster.name,
            len(cluster.branches),
        )

    # ================================
    # Filiales
    # ================================
    def add_branch(self, cluster_name: str, branch_name: str) -> GeoBranch:
        cluster = self._cluster(cluster_name)
        clean = branch_name.strip()
        if not clean:
            raise ValueError("Nome da filial vazio")
        if any(_same(b.name, clean) for b in cluster.branches):
            raise GeoConflictError(f"Filial {clean} já existe em {cluster.name}")
        branch = GeoBranch(name=clean)
        cluster.branches.append(branch)
        return branch

    def rename_branch(self, cluster_name: str, old: str, new: str) -> None:
        cluster = self._cluster(cluster_name)
        branch = self._branch(cluster_name, old)
        clean = new.strip()
        if not clean:
            raise ValueError("Nome da filial vazio")
        if any(b is not branch and _same(b.name, clean) for b in cluster.branches):
            raise GeoConflictError(f"Filial {clean} já existe em {cluster.name}")
        branch.name = clean

    def remove_branch(self, cluster_name: str, branch_name: str) -> None:
        cluster = self._cluster(cluster_name)
        branch = self._branch(cluster_name, branch_name)
        cluster.branches.remove(branch)

    # ================================
    # Setores
    # ================================
    def add_sector(self, cluster_name: str, branch_name: str, sector: str) -> None:
        branch = self._branch(cluster_name, branch_name)
        clean = sector.strip()
        if not clean:
            raise ValueError("Nome do setor vazio")
        if any(_same(s, clean) for s in branch.sectors):
            raise GeoConflictError(f"Setor {clean} já existe em {branch.name}")
        branch.sectors.append(clean)

    def rename_sector(self, cluster_name: str, branch_name: str, old: str, new: str) -> None:
        branch = self._branch(cluster_name, branch_name)
        idx = next((i for i, s in enumerate(branch.sectors) if _same(s, old)), None)
        if idx is None:
            raise GeoNotFoundError(f"Setor {old} não encontrado em {branch.name}")
        clean = new.strip()
        if not clean:
            raise ValueError("Nome do setor vazio")
        if any(i != idx and _same(s, clean) for i, s in enumerate(branch.sectors)):
            raise GeoConflictError(f"Setor {clean} já existe em {branch.name}")
        branch.sectors[idx] = clean

    def remove_sector(self, cluster_name: str, branch_name: str, sector: str) -> None:
        branch = self._branch(cluster_name, branch_name)
        before = len(branch.sectors)
        branch.sectors = [s for s in branch.sectors if not _same(s, sector)]
        if len(branch.sectors) == before:
            raise GeoNotFoundError(f"Setor {sector} não encontrado em {branch.name}")

    # ================================
    # Vistas derivadas
    # ================================
    def cluster_list(self) -> List[str]:
        return sorted(c.name for c in self.clusters)

    def branch_to_cluster(self) -> Dict[str, str]:
        mapping: Dict[str, str] = {}
        for cluster in self.clusters:
            for branch in cluster.branches:
                mapping[branch.name] = cluster.name
        return mapping

    def branch_sectors(self) -> Dict[str, List[str]]:
        mapping: Dict[str, List[str]] = {}
        for cluster in self.clusters:
            for branch in cluster.branches:
                mapping[branch.name] = list(branch.sectors)
        return mapping

    def cluster_for_branch(self, branch: str | None) -> Optional[str]:
        """Cluster de una filial (comparación sin mayúsculas) o None."""
        if not branch:
            return None
        for cluster in self.clusters:
            if any(_same(b.name, branch) for b in cluster.branches):
                return cluster.name
        return None

    def maps(self) -> GeoMaps:
        return GeoMaps(
            clusters=self.cluster_list(),
            branch_to_cluster=self.branch_to_cluster(),
            branch_sectors=self.branch_sectors(),
        )

    # ================================
    # Importación Cluster;Filial;Setor
    # ================================
    def import_rows(self, text: str) -> GeoImportResult:
        """Agrega al árbol los nodos de un CSV ``Cluster;Filial;Setor`` (nunca elimina)."""
        table = parse_table(text)
        result = GeoImportResult()
        if table.is_empty:
            result.errors.append("Arquivo vazio")
            return result
        for row in table.rows:
            cluster_name, branch_name, sector = row.get(0), row.get(1), row.get(2)
            if not cluster_name:
                result.errors.append(f"Linha {row.line_number}: Cluster ausente")
                continue
            result.total += 1
            cluster = self.find_cluster(cluster_name)
            if cluster is None:
                cluster = self.add_cluster(cluster_name)
                result.clusters_added += 1
            if not branch_name:
                continue
            branch = next((b for b in cluster.branches if _same(b.name, branch_name)), None)
            if branch is None:
                branch = self.add_branch(cluster.name, branch_name)
                result.branches_added += 1
            if sector and not any(_same(s, sector) for s in branch.sectors):
                branch.sectors.append(sector.strip())
                result.sectors_added += 1
        logger.info(
            "action=geo_import total=%s clusters=%s branches=%s sectors=%s errors=%s",
            result.total,
            result.clusters_added,
            result.branches_added,
            result.sectors_added,
            len(result.errors),
        )
        return result

    def to_csv_rows(self) -> List[List[str]]:
        rows: List[List[str]] = []
        for cluster in self.clusters:
            for branch in cluster.branches:
                if branch.sectors:
                    rows.extend([cluster.name, branch.name, s] for s in branch.sectors)
                else:
                    rows.append([cluster.name, branch.name, ""])
        return rows


def validate_geo(clusters: Iterable[GeoCluster]) -> List[GeoCluster]:
    """Reconstruye un árbol completo validando unicidad en cada nivel."""
    tree = GeoTree()
    for cluster in clusters:
        added = tree.add_cluster(cluster.name)
        for branch in cluster.branches:
            tree.add_branch(added.name, branch.name)
            for sector in branch.sectors:
                tree.add_sector(added.name, branch.name, sector)
    return tree.clusters
