# Nombre de archivo: metrics.py
# Ubicación de archivo: core/metrics.py
# Descripción: Acumulador simple de métricas de solicitudes y de lotes de importación

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class Metrics:
    """Acumulador básico de métricas del servicio."""

    total_requests: int = 0
    total_latency: float = 0.0
    imports_total: int = 0
    rows_new: int = 0
    rows_updated: int = 0
    row_errors: int = 0
    failed_chunks: int = 0
    imports_by_kind: Dict[str, int] = field(default_factory=dict)

    def record(self, latency: float) -> None:
        """Registra una nueva solicitud y su latencia."""
        self.total_requests += 1
        self.total_latency += latency

    def record_import(self, kind: str, new: int, updated: int, errors: int, failed_chunks: int = 0) -> None:
        """Acumula el resultado de un lote de importación."""
        self.imports_total += 1
        self.imports_by_kind[kind] = self.imports_by_kind.get(kind, 0) + 1
        self.rows_new += new
        self.rows_updated += updated
        self.row_errors += errors
        self.failed_chunks += failed_chunks

    def snapshot(self) -> dict[str, object]:
        """Devuelve un resumen con promedio de latencia en ms."""
        promedio = (
            self.total_latency / self.total_requests if self.total_requests else 0.0
        )
        return {
            "total_requests": self.total_requests,
            "average_latency_ms": promedio * 1000,
            "imports_total": self.imports_total,
            "imports_by_kind": dict(self.imports_by_kind),
            "rows_new": self.rows_new,
            "rows_updated": self.rows_updated,
            "row_errors": self.row_errors,
            "failed_chunks": self.failed_chunks,
        }

    def reset(self) -> None:
        """Reinicia los contadores."""
        self.total_requests = 0
        self.total_latency = 0.0
        self.imports_total = 0
        self.rows_new = 0
        self.rows_updated = 0
        self.row_errors = 0
        self.failed_chunks = 0
        self.imports_by_kind = {}
