# Nombre de archivo: errors.py
# Ubicación de archivo: core/importer/errors.py
# Descripción: Excepciones del motor de importación (fila inválida, referencia ambigua, error fatal)

from __future__ import annotations

from typing import Sequence


class RowError(ValueError):
    """La fila no es utilizable; se omite y el lote continúa."""


class AmbiguousReferenceError(RowError):
    """Un nombre coincide con más de un registro del rol requerido."""

    def __init__(self, name: str, role: str, candidates: Sequence[str]) -> None:
        self.name = name
        self.role = role
        self.candidates = list(candidates)
        super().__init__(
            f"Referência ambígua para {role} '{name}' (IDs: {', '.join(self.candidates)})"
        )


class FatalImportError(RuntimeError):
    """Error de preparación: el lote se aborta con un único error."""
