# Nombre de archivo: test_occurrence_state.py
# Ubicación de archivo: tests/test_occurrence_state.py
# Descripción: Pruebas de la máquina de estados de ocurrencias y del bloqueo en estados terminales

import pytest

from core.directory.schemas import EscalationLevel, GeoLocation, OccurrenceStatus
from core.services.occurrences import (
    ALLOWED_TRANSITIONS,
    InvalidTransitionError,
    OccurrenceLockedError,
    can_transition,
    change_escalation,
    change_status,
    edit_occurrence,
    register_occurrence,
)


@pytest.fixture
def occurrence():
    return register_occurrence(
        user_id="T100",
        user_name="João Silva",
        registered_by="maria.santos",
        date="2024-03-01",
        category="Atraso",
        time="08:30",
    )


def test_registro_crea_entrada_inicial(occurrence) -> None:
    assert occurrence.status is OccurrenceStatus.REGISTRADA
    assert [e.action for e in occurrence.audit_trail] == ["REGISTRO"]
    assert occurrence.audit_trail[0].user == "maria.santos"


def test_estados_terminales_sin_salida() -> None:
    assert ALLOWED_TRANSITIONS[OccurrenceStatus.CONCLUIDA] == set()
    assert ALLOWED_TRANSITIONS[OccurrenceStatus.CANCELADA] == set()
    assert can_transition(OccurrenceStatus.EM_ANALISE, OccurrenceStatus.DEVOLVIDA)
    assert not can_transition(OccurrenceStatus.REGISTRADA, OccurrenceStatus.DEVOLVIDA)


def test_cambio_de_estado_agrega_una_entrada(occurrence) -> None:
    change_status(occurrence, OccurrenceStatus.EM_ANALISE, "admin")
    change_status(occurrence, OccurrenceStatus.DEVOLVIDA, "admin", reason="Falta evidência")

    assert occurrence.status is OccurrenceStatus.DEVOLVIDA
    assert occurrence.feedback == "Falta evidência"
    assert [e.action for e in occurrence.audit_trail] == ["REGISTRO", "EM_ANALISE", "DEVOLVIDA"]
    assert occurrence.audit_trail[-1].details == "Status alterado para DEVOLVIDA. Motivo: Falta evidência"


def test_transicion_invalida(occurrence) -> None:
    with pytest.raises(InvalidTransitionError):
        change_status(occurrence, OccurrenceStatus.DEVOLVIDA, "admin")
    assert len(occurrence.audit_trail) == 1


def test_terminal_bloquea_todo(occurrence) -> None:
    change_status(occurrence, OccurrenceStatus.CONCLUIDA, "admin")

    with pytest.raises(OccurrenceLockedError):
        change_status(occurrence, OccurrenceStatus.EM_ANALISE, "admin")
    with pytest.raises(OccurrenceLockedError):
        change_escalation(occurrence, EscalationLevel.GERENTE, "admin")
    with pytest.raises(OccurrenceLockedError):
        edit_occurrence(occurrence, {"description": "x"}, "admin")
    assert len(occurrence.audit_trail) == 2


def test_escalonamiento_sin_cambio_no_audita(occurrence) -> None:
    change_escalation(occurrence, EscalationLevel.NONE, "admin")
    assert len(occurrence.audit_trail) == 1

    change_escalation(occurrence, EscalationLevel.COORDENADOR, "admin")
    assert occurrence.escalation_level is EscalationLevel.COORDENADOR
    assert occurrence.audit_trail[-1].action == "ESCALONAMENTO"


def test_edicion_de_campos(occurrence) -> None:
    edit_occurrence(occurrence, {"description": "Pneu furado", "location": {"lat": -12.9, "lng": -38.4}}, "admin")

    assert occurrence.description == "Pneu furado"
    assert occurrence.location == GeoLocation(lat=-12.9, lng=-38.4)
    assert occurrence.audit_trail[-1].action == "EDICAO"
    assert occurrence.audit_trail[-1].details == "Campos alterados: description, location"


def test_edicion_rechaza_campos_no_editables(occurrence) -> None:
    with pytest.raises(ValueError, match="status"):
        edit_occurrence(occurrence, {"status": "CONCLUIDA"}, "admin")
