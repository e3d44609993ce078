"""Detecção de sobreposição de horários na agenda de um profissional."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import and_

from .. import db
from .models import Agendamento


def intervalos_sobrepostos(
    inicio_a: datetime, fim_a: datetime, inicio_b: datetime, fim_b: datetime
) -> bool:
    """Sobreposição de intervalos semiabertos ``[inicio, fim)``.

    Encostar (09:30 termina, 09:30 começa) não conflita; intervalos de
    duração zero ou invertidos nunca conflitam.
    """
    if fim_a <= inicio_a or fim_b <= inicio_b:
        return False
    return inicio_a < fim_b and fim_a > inicio_b


def has_conflict(
    profissional_id: int,
    data: date,
    inicio: datetime,
    fim: datetime,
    exclude_id: int | None = None,
) -> bool:
    """True se o profissional já tem agendamento não cancelado sobreposto no dia."""
    if fim <= inicio:
        return False
    q = db.session.query(Agendamento.id).filter(
        Agendamento.profissional_id == profissional_id,
        Agendamento.data == data,
        Agendamento.status != "cancelado",
        and_(
            Agendamento.hora_inicio < fim,
            Agendamento.hora_fim > inicio,
            Agendamento.hora_fim > Agendamento.hora_inicio,
        ),
    )
    if exclude_id is not None:
        q = q.filter(Agendamento.id != exclude_id)
    return q.first() is not None
