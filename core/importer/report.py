# Nombre de archivo: report.py
# Ubicación de archivo: core/importer/report.py
# Descripción: Resultado agregado de un lote de importación y detalle de escritura por bloques

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ChunkResult:
    """Resultado de escribir un bloque contra el almacén."""

    operation: str
    offset: int
    size: int
    ok: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "offset": self.offset,
            "size": self.size,
            "ok": self.ok,
            "error": self.error,
        }


@dataclass
class BatchReport:
    """Resumen devuelto al llamador incluso ante fallas parciales."""

    total: int = 0
    new: int = 0
    updated: int = 0
    errors: List[str] = field(default_factory=list)
    chunks: List[ChunkResult] = field(default_factory=list)

    @classmethod
    def fatal(cls, message: str) -> "BatchReport":
        return cls(errors=[message])

    def count(self, existed: bool) -> None:
        if existed:
            self.updated += 1
        else:
            self.new += 1
        self.total += 1

    def row_error(self, line_number: int, reason: str) -> None:
        self.errors.append(f"Linha {line_number}: {reason}")

    def chunk_written(self, operation: str, offset: int, size: int) -> None:
        self.chunks.append(ChunkResult(operation=operation, offset=offset, size=size, ok=True))

    def chunk_failed(self, operation: str, offset: int, size: int, detail: str) -> None:
        self.chunks.append(ChunkResult(operation=operation, offset=offset, size=size, ok=False, error=detail))
        self.errors.append(f"Erro ao salvar lote iniciando em {offset}: {detail}")

    @property
    def persisted(self) -> int:
        """Registros efectivamente escritos (solo bloques de upsert exitosos)."""
        return sum(c.size for c in self.chunks if c.ok and c.operation == "upsert")

    @property
    def failed_chunks(self) -> int:
        return sum(1 for c in self.chunks if not c.ok)

    def to_response(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "new": self.new,
            "updated": self.updated,
            "errors": list(self.errors),
            "chunks": [c.to_dict() for c in self.chunks],
            "persisted": self.persisted,
        }
