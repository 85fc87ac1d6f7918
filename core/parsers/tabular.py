# Nombre de archivo: tabular.py
# Ubicación de archivo: core/parsers/tabular.py
# Descripción: Parser tolerante de planillas delimitadas (CSV con ';' o ',') para importaciones

"""Lectura de texto delimitado exportado por planillas.

El parser nunca rechaza filas: limpia los campos, detecta el separador y
entrega cada fila con su número de línea para que el motor de importación
pueda reportar errores del tipo ``Linha N: ...``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

BOM = "\ufeff"
_LINE_SPLIT = re.compile(r"\r?\n")
_SNIFF_LINES = 5


@dataclass(frozen=True)
class ParsedRow:
    """Fila de datos con su número de línea (base 1, contando el encabezado)."""

    line_number: int
    fields: List[str]

    def get(self, index: int) -> str:
        """Devuelve el campo ``index`` o cadena vacía si la fila es más corta."""
        if index < len(self.fields):
            return self.fields[index]
        return ""

    def __len__(self) -> int:
        return len(self.fields)


@dataclass
class ParsedTable:
    delimiter: str
    header: List[str] = field(default_factory=list)
    rows: List[ParsedRow] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.header and not self.rows


def detect_delimiter(lines: List[str]) -> str:
    """Elige ';' salvo que ',' aparezca estrictamente más veces en las primeras líneas."""
    sample = lines[:_SNIFF_LINES]
    semicolons = sum(line.count(";") for line in sample)
    commas = sum(line.count(",") for line in sample)
    return "," if commas > semicolons else ";"


def clean_field(raw: str) -> str:
    """Recorta espacios, quita un par de comillas externas y las comillas dobles internas."""
    value = raw.strip()
    if value[:1] in ("\"", "'"):
        value = value[1:]
    if value[-1:] in ("\"", "'"):
        value = value[:-1]
    return value.replace("\"", "").strip()


def split_lines(text: str) -> List[str]:
    """Quita BOM, separa en líneas y descarta las vacías."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    return [line for line in _LINE_SPLIT.split(text.strip()) if line.strip()]


def parse_table(text: str) -> ParsedTable:
    """Convierte el texto completo del archivo en encabezado + filas limpias."""
    lines = split_lines(text or "")
    if not lines:
        return ParsedTable(delimiter=";")
    delimiter = detect_delimiter(lines)
    header = [clean_field(cell) for cell in lines[0].split(delimiter)]
    rows = [
        ParsedRow(line_number=index + 1, fields=[clean_field(cell) for cell in line.split(delimiter)])
        for index, line in enumerate(lines)
        if index > 0
    ]
    return ParsedTable(delimiter=delimiter, header=header, rows=rows)


__all__ = ["BOM", "ParsedRow", "ParsedTable", "clean_field", "detect_delimiter", "parse_table", "split_lines"]
