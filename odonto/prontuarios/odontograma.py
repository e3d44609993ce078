"""Odontograma: leitura da ficha e inclusão de procedimentos por dente/face.

A ficha é criada sob demanda no primeiro procedimento. A criação é um
upsert protegido pela constraint única em ``prontuario_id``: o INSERT roda
num savepoint e, se outra requisição criou a ficha antes, relemos a
existente.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError

from .. import db
from ..errors import NotFoundError
from ..utils_db import retry_on_busy
from .models import Odontograma, ProcedimentoOdontograma, Prontuario

logger = logging.getLogger(__name__)


def _prontuario_do_paciente(paciente_id: int, prontuario_id: int) -> Prontuario | None:
    return Prontuario.query.filter_by(id=prontuario_id, paciente_id=paciente_id).first()


def marcacoes(procedimentos: list[ProcedimentoOdontograma]) -> dict[str, list[str]]:
    """Faces marcadas por dente (uma face aparece uma vez, mesmo com vários registros)."""
    por_dente: dict[str, list[str]] = {}
    for proc in procedimentos:
        faces = por_dente.setdefault(str(proc.dente), [])
        if proc.face not in faces:
            faces.append(proc.face)
    return por_dente


def get_chart(paciente_id: int, prontuario_id: int) -> dict[str, Any]:
    vazio: dict[str, Any] = {"procedimentos": [], "marcacoes": {}}
    if _prontuario_do_paciente(paciente_id, prontuario_id) is None:
        return vazio
    odontograma = Odontograma.query.filter_by(prontuario_id=prontuario_id).first()
    if odontograma is None:
        return vazio
    procedimentos = list(odontograma.procedimentos)
    return {
        "id": odontograma.id,
        "prontuario_id": odontograma.prontuario_id,
        "procedimentos": [p.to_dict() for p in procedimentos],
        "marcacoes": marcacoes(procedimentos),
    }


def _obter_ou_criar(prontuario_id: int) -> Odontograma:
    existente = Odontograma.query.filter_by(prontuario_id=prontuario_id).first()
    if existente is not None:
        return existente
    try:
        with db.session.begin_nested():
            novo = Odontograma(prontuario_id=prontuario_id)
            db.session.add(novo)
        return novo
    except IntegrityError:
        logger.info("Odontograma do prontuário %s criado em paralelo; relendo", prontuario_id)
        return Odontograma.query.filter_by(prontuario_id=prontuario_id).one()


@retry_on_busy
def add_procedure(paciente_id: int, prontuario_id: int, dados: dict[str, Any]) -> ProcedimentoOdontograma:
    if _prontuario_do_paciente(paciente_id, prontuario_id) is None:
        raise NotFoundError("Prontuário não encontrado")
    odontograma = _obter_ou_criar(prontuario_id)
    procedimento = ProcedimentoOdontograma(
        odontograma=odontograma,
        dente=dados["dente"],
        face=dados["face"],
        procedimento=dados["procedimento"],
        observacao=dados.get("observacao"),
        data=dados.get("data") or datetime.utcnow(),
    )
    db.session.add(procedimento)
    db.session.commit()
    return procedimento
