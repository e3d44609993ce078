"""Serviços da agenda: criação/edição com checagem de conflito.

A checagem e a escrita rodam sob ``key_lock`` na chave
``(profissional, data)`` para que duas reservas simultâneas do mesmo
horário não passem ambas pela verificação.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any

from .. import db
from ..datas import on_date
from ..errors import ConflictError, NotFoundError, ValidationError
from ..pacientes.models import Paciente
from ..profissionais.models import Profissional
from ..utils_db import key_lock, retry_on_busy
from .conflitos import has_conflict
from .models import STATUS_ATIVOS, Agendamento

logger = logging.getLogger(__name__)

HORARIO_INDISPONIVEL = "Horário não disponível"


def _verificar_vinculos(dados: dict[str, Any]) -> None:
    if (
        dados.get("paciente_id") is not None
        and db.session.get(Paciente, dados["paciente_id"]) is None
    ):
        raise NotFoundError("Paciente não encontrado")
    if (
        dados.get("profissional_id") is not None
        and db.session.get(Profissional, dados["profissional_id"]) is None
    ):
        raise NotFoundError("Profissional não encontrado")


def _janela(dia: date, inicio: time, fim: time) -> tuple[datetime, datetime]:
    hora_inicio = on_date(dia, inicio)
    hora_fim = on_date(dia, fim)
    if hora_fim <= hora_inicio:
        raise ValidationError(
            {"hora_fim": ["Horário final deve ser posterior ao inicial"]},
            message="Horário final deve ser posterior ao inicial",
        )
    return hora_inicio, hora_fim


def _garantir_disponivel(
    profissional_id: int,
    dia: date,
    inicio: datetime,
    fim: datetime,
    exclude_id: int | None = None,
) -> None:
    if has_conflict(profissional_id, dia, inicio, fim, exclude_id=exclude_id):
        logger.info(
            "Conflito de agenda: profissional=%s data=%s %s-%s",
            profissional_id,
            dia,
            inicio.time(),
            fim.time(),
        )
        raise ConflictError(HORARIO_INDISPONIVEL)


def listar_agendamentos(
    dia: date | None = None,
    profissional_id: int | None = None,
    paciente_id: int | None = None,
    status: str = "",
):
    query = Agendamento.query
    if dia is not None:
        query = query.filter(Agendamento.data == dia)
    if profissional_id:
        query = query.filter(Agendamento.profissional_id == profissional_id)
    if paciente_id:
        query = query.filter(Agendamento.paciente_id == paciente_id)
    if status:
        query = query.filter(Agendamento.status == status)
    return query.order_by(Agendamento.data, Agendamento.hora_inicio)


def agendamentos_do_dia(dia: date) -> list[Agendamento]:
    return (
        Agendamento.query.filter(Agendamento.data == dia)
        .order_by(Agendamento.hora_inicio)
        .all()
    )


def proximos_agendamentos(
    hoje: date, limite: int = 10, excluir=("cancelado",)
) -> list[Agendamento]:
    return (
        Agendamento.query.filter(
            Agendamento.data >= hoje, Agendamento.status.notin_(excluir)
        )
        .order_by(Agendamento.data, Agendamento.hora_inicio)
        .limit(limite)
        .all()
    )


@retry_on_busy
def criar_agendamento(dados: dict[str, Any]) -> Agendamento:
    _verificar_vinculos(dados)
    dia = dados["data"]
    inicio, fim = _janela(dia, dados["hora_inicio"], dados["hora_fim"])
    status = dados.get("status") or "agendado"
    with key_lock("agenda", dados["profissional_id"], dia):
        if status in STATUS_ATIVOS:
            _garantir_disponivel(dados["profissional_id"], dia, inicio, fim)
        agendamento = Agendamento(
            paciente_id=dados["paciente_id"],
            profissional_id=dados["profissional_id"],
            data=dia,
            hora_inicio=inicio,
            hora_fim=fim,
            procedimento=dados["procedimento"],
            observacoes=dados.get("observacoes"),
            status=status,
        )
        db.session.add(agendamento)
        db.session.commit()
    return agendamento


def _reativado(atual: str, novo: str | None) -> bool:
    return atual == "cancelado" and novo in STATUS_ATIVOS


@retry_on_busy
def atualizar_agendamento(agendamento: Agendamento, dados: dict[str, Any]) -> Agendamento:
    """Atualização parcial; a agenda é revalidada com os valores mesclados."""
    _verificar_vinculos(dados)
    dia = dados.get("data") or agendamento.data
    profissional_id = dados.get("profissional_id") or agendamento.profissional_id
    inicio, fim = _janela(
        dia,
        dados.get("hora_inicio") or agendamento.hora_inicio.time(),
        dados.get("hora_fim") or agendamento.hora_fim.time(),
    )
    status = dados.get("status") or agendamento.status
    mudou_agenda = (
        dia != agendamento.data
        or profissional_id != agendamento.profissional_id
        or inicio != agendamento.hora_inicio
        or fim != agendamento.hora_fim
    )
    checar = status in STATUS_ATIVOS and (
        mudou_agenda or _reativado(agendamento.status, status)
    )
    with key_lock("agenda", profissional_id, dia):
        if checar:
            _garantir_disponivel(profissional_id, dia, inicio, fim, exclude_id=agendamento.id)
        for campo in ("paciente_id", "procedimento", "observacoes"):
            if campo in dados:
                setattr(agendamento, campo, dados[campo])
        agendamento.data = dia
        agendamento.profissional_id = profissional_id
        agendamento.hora_inicio = inicio
        agendamento.hora_fim = fim
        agendamento.status = status
        db.session.commit()
    return agendamento


@retry_on_busy
def alterar_status(agendamento: Agendamento, status: str) -> Agendamento:
    if _reativado(agendamento.status, status):
        with key_lock("agenda", agendamento.profissional_id, agendamento.data):
            _garantir_disponivel(
                agendamento.profissional_id,
                agendamento.data,
                agendamento.hora_inicio,
                agendamento.hora_fim,
                exclude_id=agendamento.id,
            )
            agendamento.status = status
            db.session.commit()
        return agendamento
    agendamento.status = status
    db.session.commit()
    return agendamento


@retry_on_busy
def excluir_agendamento(agendamento: Agendamento) -> None:
    if agendamento.status == "concluido":
        raise ConflictError("Não é possível excluir um agendamento concluído")
    db.session.delete(agendamento)
    db.session.commit()
