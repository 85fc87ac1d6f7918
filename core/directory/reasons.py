# Nombre de archivo: reasons.py
# Ubicación de archivo: core/directory/reasons.py
# Descripción: Editor del árbol Categoria -> Motivo usado al registrar ocurrencias

from __future__ import annotations

from typing import Iterable, List

from core.directory.schemas import ReasonCategory

NEW_CATEGORY_BASE = "NOVA CATEGORIA"


class ReasonConflictError(ValueError):
    pass


class ReasonTree:
    """Copia editable de la configuración de motivos."""

    def __init__(self, categories: Iterable[ReasonCategory] = ()) -> None:
        self.categories: List[ReasonCategory] = [c.model_copy(deep=True) for c in categories]

    def _category(self, name: str) -> ReasonCategory:
        for category in self.categories:
            if category.category == name:
                return category
        raise LookupError(f"Categoria {name} não encontrada")

    def add_category(self) -> ReasonCategory:
        """Crea una categoría con nombre provisorio único."""
        name = f"{NEW_CATEGORY_BASE} (EDITAR)"
        counter = 1
        while any(c.category == name for c in self.categories):
            name = f"{NEW_CATEGORY_BASE} {counter} (EDITAR)"
            counter += 1
        category = ReasonCategory(category=name)
        self.categories.append(category)
        return category

    def rename_category(self, old: str, new: str) -> None:
        clean = new.strip()
        if not clean:
            raise ValueError("Nome da categoria vazio")
        category = self._category(old)
        if any(c is not category and c.category == clean for c in self.categories):
            raise ReasonConflictError("Categoria já existe.")
        category.category = clean

    def remove_category(self, name: str) -> None:
        self.categories.remove(self._category(name))

    def add_reason(self, category_name: str, reason: str) -> None:
        clean = reason.strip()
        if not clean:
            raise ValueError("Motivo vazio")
        category = self._category(category_name)
        if clean in category.reasons:
            raise ReasonConflictError("Motivo já existe nesta categoria.")
        category.reasons.append(clean)

    def rename_reason(self, category_name: str, old: str, new: str) -> None:
        category = self._category(category_name)
        clean = new.strip()
        if old not in category.reasons:
            raise LookupError(f"Motivo {old} não encontrado")
        if not clean:
            raise ValueError("Motivo vazio")
        if clean != old and clean in category.reasons:
            raise ReasonConflictError("Motivo já existe nesta categoria.")
        category.reasons[category.reasons.index(old)] = clean

    def remove_reason(self, category_name: str, reason: str) -> None:
        category = self._category(category_name)
        if reason not in category.reasons:
            raise LookupError(f"Motivo {reason} não encontrado")
        category.reasons.remove(reason)

    def to_csv_rows(self) -> List[List[str]]:
        return [[c.category, r] for c in self.categories for r in c.reasons]


def validate_reasons(categories: Iterable[ReasonCategory]) -> List[ReasonCategory]:
    """Rechaza categorías repetidas o motivos duplicados dentro de una categoría."""
    seen: set[str] = set()
    for category in categories:
        if category.category in seen:
            raise ReasonConflictError(f"Categoria {category.category} duplicada")
        seen.add(category.category)
        if len(set(category.reasons)) != len(category.reasons):
            raise ReasonConflictError(f"Motivo duplicado em {category.category}")
    return list(categories)
