# Nombre de archivo: engine.py
# Ubicación de archivo: core/importer/engine.py
# Descripción: Motor genérico de reconciliación MERGE/REPLACE con escritura secuencial por bloques

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from core.config import Settings, get_settings
from core.importer.errors import FatalImportError, RowError
from core.importer.report import BatchReport
from core.importer.strategies import ImportKind, ImportMode, ImportStrategy, strategy_for
from core.importer.working_set import DirectorySnapshot, WorkingSet
from core.parsers.tabular import ParsedRow, parse_table
from core.repositories.directory import DirectoryRepository

logger = logging.getLogger(__name__)


@dataclass
class ReconcileOutcome:
    """Resultado en memoria de un lote, antes de persistir."""

    mode: ImportMode
    written: List[BaseModel] = field(default_factory=list)
    cleared_keys: List[str] = field(default_factory=list)
    report: BatchReport = field(default_factory=BatchReport)
    working: Optional[WorkingSet] = None

    @property
    def stale_keys(self) -> List[str]:
        """Claves del rol importado que existían y no vinieron en el archivo (solo REPLACE)."""
        kept = {e.id for e in self.written}
        return [k for k in self.cleared_keys if k not in kept]


def reconcile(
    rows: Sequence[ParsedRow],
    mode: ImportMode,
    snapshot: DirectorySnapshot,
    strategy: ImportStrategy,
) -> ReconcileOutcome:
    """Procesa todas las filas contra una copia de trabajo propia del lote.

    En REPLACE se vacía primero la porción de la copia que pertenece a la
    clase de rol importada. Cada fila válida queda disponible de inmediato
    para la resolución de nombres de las filas siguientes.
    """
    mode = ImportMode(mode)
    if mode is ImportMode.REPLACE and not strategy.supports_replace:
        logger.warning("action=reconcile kind=%s replace_downgraded=MERGE", strategy.kind.value)
        mode = ImportMode.MERGE

    working = WorkingSet.from_snapshot(snapshot)
    entities = strategy.entities(working)
    outcome = ReconcileOutcome(mode=mode, working=working)

    if mode is ImportMode.REPLACE:
        outcome.cleared_keys = [k for k, e in entities.items() if strategy.in_role_class(e)]
        for key in outcome.cleared_keys:
            working.retired[key] = entities.pop(key)

    written: Dict[str, BaseModel] = {}
    report = outcome.report
    for row in rows:
        if len(row) < strategy.min_columns:
            report.row_error(row.line_number, "Colunas insuficientes")
            continue
        try:
            entity = strategy.build(row, working)
        except RowError as exc:
            report.row_error(row.line_number, str(exc))
            continue
        existed = entity.id in entities
        entities[entity.id] = entity
        written[entity.id] = entity
        report.count(existed)

    outcome.written = list(written.values())
    logger.info(
        "action=reconcile kind=%s mode=%s total=%s new=%s updated=%s errors=%s",
        strategy.kind.value,
        mode.value,
        report.total,
        report.new,
        report.updated,
        len(report.errors),
    )
    return outcome


def _write_chunks(
    report: BatchReport,
    operation: str,
    items: Sequence,
    chunk_size: int,
    writer,
) -> None:
    # Bloques secuenciales; una falla no revierte los bloques previos ni se reintenta
    for offset in range(0, len(items), chunk_size):
        chunk = list(items[offset:offset + chunk_size])
        try:
            writer(chunk)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "action=import_chunk operation=%s offset=%s size=%s error=%s",
                operation,
                offset,
                len(chunk),
                exc,
            )
            report.chunk_failed(operation, offset, len(chunk), str(exc))
        else:
            report.chunk_written(operation, offset, len(chunk))


def persist(
    outcome: ReconcileOutcome,
    strategy: ImportStrategy,
    repository: DirectoryRepository,
    chunk_size: int,
    soft_replace: bool = False,
) -> BatchReport:
    """Escribe lo reconciliado y, en REPLACE, retira lo ausente del archivo."""
    report = outcome.report
    collection = strategy.collection
    _write_chunks(
        report,
        "upsert",
        outcome.written,
        chunk_size,
        lambda chunk: repository.save(collection, chunk),
    )
    stale = outcome.stale_keys
    if outcome.mode is ImportMode.REPLACE and stale:
        if soft_replace and strategy.kind in (ImportKind.TECHNICIANS, ImportKind.MANAGERS):
            snapshot = {m.id: m for m in repository.list_members()}
            retired = [
                snapshot[k].model_copy(update={"active": False}) for k in stale if k in snapshot
            ]
            _write_chunks(
                report,
                "deactivate",
                retired,
                chunk_size,
                lambda chunk: repository.save(collection, chunk),
            )
        else:
            _write_chunks(
                report,
                "delete",
                stale,
                chunk_size,
                lambda chunk: repository.delete(collection, chunk),
            )
    return report


def decode_content(content: bytes) -> str:
    """Decodifica el archivo subido (UTF-8 con o sin BOM, o Windows-1252)."""
    if b"\x00" in content:
        raise FatalImportError("Conteúdo ilegível (arquivo binário?)")
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        pass
    try:
        return content.decode("cp1252")
    except UnicodeDecodeError as exc:
        raise FatalImportError("Conteúdo ilegível (codificação não suportada)") from exc


def run_import(
    text: str,
    kind: ImportKind | str,
    mode: ImportMode | str,
    repository: DirectoryRepository,
    settings: Settings | None = None,
) -> BatchReport:
    """Ejecuta un lote completo: parseo, reconciliación y escritura.

    Siempre devuelve un ``BatchReport``; los errores de preparación producen
    ``total = 0`` y exactamente un error.
    """
    settings = settings or get_settings()
    strategy = strategy_for(kind)
    table = parse_table(text)
    if table.is_empty:
        logger.warning("action=run_import kind=%s fatal=arquivo_vazio", strategy.kind.value)
        return BatchReport.fatal("Arquivo vazio")
    if not table.rows:
        return BatchReport.fatal("Arquivo sem linhas de dados")
    try:
        snapshot = repository.load_snapshot()
    except Exception as exc:  # noqa: BLE001
        logger.exception("action=run_import kind=%s fatal=load_snapshot error=%s", strategy.kind.value, exc)
        return BatchReport.fatal(f"Falha ao ler dados atuais: {exc}")

    strategy.prepare(table.header)
    outcome = reconcile(table.rows, ImportMode(mode), snapshot, strategy)
    report = persist(
        outcome,
        strategy,
        repository,
        settings.imports.chunk_size,
        soft_replace=settings.imports.soft_replace,
    )
    logger.info(
        "action=run_import kind=%s mode=%s total=%s new=%s updated=%s errors=%s persisted=%s",
        strategy.kind.value,
        outcome.mode.value,
        report.total,
        report.new,
        report.updated,
        len(report.errors),
        report.persisted,
    )
    return report


def run_import_bytes(
    content: bytes,
    kind: ImportKind | str,
    mode: ImportMode | str,
    repository: DirectoryRepository,
    settings: Settings | None = None,
) -> BatchReport:
    try:
        text = decode_content(content)
    except FatalImportError as exc:
        return BatchReport.fatal(str(exc))
    return run_import(text, kind, mode, repository, settings)
