# Nombre de archivo: export.py
# Ubicación de archivo: core/importer/export.py
# Descripción: Exportación CSV (con BOM) en el mismo orden de columnas que la importación, plantillas y XLSX

from __future__ import annotations

import csv
import io
from datetime import date as date_cls
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from core.directory.geo import GeoTree
from core.directory.reasons import ReasonTree
from core.directory.schemas import (
    EscalationLevel,
    GeoCluster,
    Occurrence,
    OccurrenceStatus,
    ReasonCategory,
    TeamMember,
    TeamMemberRole,
    User,
)
from core.importer.strategies import ImportKind
from core.parsers.tabular import BOM

TECHNICIAN_HEADER = ["ID", "Nome", "Supervisor", "Coordenador", "Gerente", "Controlador", "Cluster", "Filial", "Segmento", "Status"]
MANAGER_HEADER = ["ID", "Nome", "Cargo", "Superior Imediato", "Cluster", "Filial", "Status"]
OCCURRENCE_HEADER = [
    "Data",
    "Hora",
    "Técnico",
    "Registrado Por",
    "Categoria",
    "Motivo",
    "Descrição",
    "Status",
    "Recorrência",
    "Cluster",
    "Filial",
    "Setor",
    "Localização",
    "Feedback",
]
USER_HEADER = ["Nome", "ID Login", "Senha", "Email", "Apelido", "Perfil", "Clusters", "Filiais"]
GEO_HEADER = ["Cluster", "Filial", "Setor"]
REASON_HEADER = ["Categoria", "Motivo"]

REPORT_COLUMNS = [
    "ID",
    "Data Registro",
    "Hora Registro",
    "Cluster",
    "Filial",
    "Setor",
    "Tecnico",
    "Categoria",
    "Motivo",
    "Descricao",
    "Recorrencia",
    "Data/Hora Escalonamento",
    "Data/Hora Conclusao",
    "Status",
    "Registrado Por",
]

TEMPLATES = {
    ImportKind.TECHNICIANS: (
        TECHNICIAN_HEADER[:-1],
        ["T001", "João Silva", "Carlos Souza", "Marta Lima", "Ana Costa", "CTRL01", "SALVADOR", "SALVADOR", "BA"],
    ),
    ImportKind.MANAGERS: (
        MANAGER_HEADER[:-1],
        ["", "Carlos Souza", "Supervisor", "Marta Lima", "SALVADOR", "SALVADOR"],
    ),
    ImportKind.OCCURRENCES: (
        OCCURRENCE_HEADER,
        [
            "20/11/2025",
            "08:30",
            "João Silva",
            "",
            "1 - Técnico não Iniciou até 08:30",
            "1.2 Ainda em Deslocamento",
            "Trânsito na via principal",
            "REGISTRADA",
            EscalationLevel.NONE.value,
            "",
            "SALVADOR",
            "BKT_SALVADOR_AREA_01",
            "",
            "",
        ],
    ),
    ImportKind.USERS: (
        USER_HEADER,
        ["Maria Santos", "maria.santos", "", "maria@empresa.com", "Maria", "CONTROLADOR", "SALVADOR|FEIRA", ""],
    ),
}


def _safe(value: Optional[str]) -> str:
    """Evita que el separador o saltos de línea rompan la fila."""
    if value is None:
        return ""
    return str(value).replace(";", ",").replace("\r", " ").replace("\n", " ").replace("\"", "")


def to_csv_text(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Serializa con ';' y prefijo BOM para compatibilidad con planillas."""
    output = io.StringIO()
    writer = csv.writer(output, delimiter=";", lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow([_safe(v) for v in row])
    return BOM + output.getvalue()


def _names(members: Iterable[TeamMember]) -> Dict[str, str]:
    return {m.id: m.name for m in members}


def _status_label(active: bool) -> str:
    return "Ativo" if active else "Inativo"


def export_technicians(members: Sequence[TeamMember]) -> str:
    names = _names(members)
    rows = [
        [
            m.id,
            m.name,
            names.get(m.supervisor_id or "", ""),
            names.get(m.coordenador_id or "", ""),
            names.get(m.gerente_id or "", ""),
            m.controlador_id or "",
            m.cluster or "",
            m.filial or "",
            m.segment.value if m.segment else "",
            _status_label(m.active),
        ]
        for m in members
        if m.role is TeamMemberRole.TECNICO
    ]
    return to_csv_text(TECHNICIAN_HEADER, rows)


def export_managers(members: Sequence[TeamMember]) -> str:
    names = _names(members)
    order = {TeamMemberRole.GERENTE: 0, TeamMemberRole.COORDENADOR: 1, TeamMemberRole.SUPERVISOR: 2}
    managers = sorted((m for m in members if m.role.is_manager), key=lambda m: order[m.role])
    rows = [
        [
            m.id,
            m.name,
            m.role.value,
            names.get(m.reports_to_id or "", ""),
            m.cluster or "",
            m.filial or "",
            _status_label(m.active),
        ]
        for m in managers
    ]
    return to_csv_text(MANAGER_HEADER, rows)


def _format_date(iso: str) -> str:
    try:
        return date_cls.fromisoformat(iso).strftime("%d/%m/%Y")
    except ValueError:
        return iso


def _filter_period(
    occurrences: Sequence[Occurrence], start: Optional[date_cls], end: Optional[date_cls]
) -> List[Occurrence]:
    selected = []
    for occ in occurrences:
        try:
            day = date_cls.fromisoformat(occ.date)
        except ValueError:
            continue
        if start and day < start:
            continue
        if end and day > end:
            continue
        selected.append(occ)
    return selected


def export_occurrences(
    occurrences: Sequence[Occurrence],
    start: Optional[date_cls] = None,
    end: Optional[date_cls] = None,
) -> str:
    # "Registrado Por" sale como ID: los nombres de usuario no son únicos
    rows = []
    for o in _filter_period(occurrences, start, end):
        location = f"{o.location.lat} {o.location.lng}" if o.location else ""
        rows.append(
            [
                _format_date(o.date),
                o.time,
                o.user_name,
                o.registered_by_user_id,
                o.category,
                o.reason,
                o.description,
                o.status.value,
                o.escalation_level.value,
                o.cluster or "",
                o.branch or "",
                o.sector or "",
                location,
                o.feedback or "",
            ]
        )
    return to_csv_text(OCCURRENCE_HEADER, rows)


def export_users(users: Sequence[User]) -> str:
    rows = [
        [
            u.name,
            u.id,
            "",
            u.email or "",
            u.nickname or "",
            u.role.value,
            "|".join(u.allowed_clusters),
            "|".join(u.allowed_branches),
        ]
        for u in users
    ]
    return to_csv_text(USER_HEADER, rows)


def export_geo(clusters: Sequence[GeoCluster]) -> str:
    return to_csv_text(GEO_HEADER, GeoTree(clusters).to_csv_rows())


def export_reasons(categories: Sequence[ReasonCategory]) -> str:
    return to_csv_text(REASON_HEADER, ReasonTree(categories).to_csv_rows())


def template_for(kind: ImportKind | str) -> str:
    header, example = TEMPLATES[ImportKind(kind)]
    return to_csv_text(header, [example])


def _last_action_time(occurrence: Occurrence, action: str) -> str:
    for entry in reversed(occurrence.audit_trail):
        if entry.action == action:
            return pd.to_datetime(entry.timestamp).strftime("%d/%m/%Y %H:%M")
    return ""


def occurrences_report_frame(
    occurrences: Sequence[Occurrence],
    start: Optional[date_cls] = None,
    end: Optional[date_cls] = None,
) -> pd.DataFrame:
    """Tabla de reporte con tiempos de escalonamiento y conclusión tomados de la auditoría."""
    records = [
        {
            "ID": o.id,
            "Data Registro": o.date,
            "Hora Registro": o.time,
            "Cluster": o.cluster or "",
            "Filial": o.branch or "",
            "Setor": o.sector or "",
            "Tecnico": o.user_name,
            "Categoria": o.category,
            "Motivo": o.reason,
            "Descricao": o.description,
            "Recorrencia": o.escalation_level.value,
            "Data/Hora Escalonamento": _last_action_time(o, "ESCALONAMENTO"),
            "Data/Hora Conclusao": _last_action_time(o, OccurrenceStatus.CONCLUIDA.value),
            "Status": o.status.value,
            "Registrado Por": o.registered_by_user_id,
        }
        for o in _filter_period(occurrences, start, end)
    ]
    return pd.DataFrame(records, columns=REPORT_COLUMNS)


def export_occurrences_xlsx(
    occurrences: Sequence[Occurrence],
    start: Optional[date_cls] = None,
    end: Optional[date_cls] = None,
) -> bytes:
    df = occurrences_report_frame(occurrences, start, end)
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Ocorrencias", index=False)
    output.seek(0)
    return output.getvalue()
