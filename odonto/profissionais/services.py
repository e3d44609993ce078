"""Regras de negócio de profissionais (unicidade conjunta e vínculos)."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import or_

from .. import db
from ..agendamentos.models import Agendamento
from ..errors import ConflictError, DatabaseBusyError
from ..uploads import remove_upload, save_upload
from ..utils_db import commit_or_conflict, retry_on_busy
from .models import Profissional

logger = logging.getLogger(__name__)

DUPLICADO = "Já existe um profissional com este CRO, CPF ou e-mail"

CAMPOS_EDITAVEIS = (
    "nome",
    "email",
    "telefone",
    "cro",
    "especialidade",
    "data_nascimento",
    "cpf",
    "rg",
    "cep",
    "logradouro",
    "numero",
    "complemento",
    "bairro",
    "cidade",
    "estado",
)
CAMPOS_UNICOS = ("cro", "cpf", "email")


def aplicar_patch(profissional: Profissional, dados: dict[str, Any]) -> Profissional:
    for campo in CAMPOS_EDITAVEIS:
        if campo in dados:
            setattr(profissional, campo, dados[campo])
    return profissional


def identidade_em_uso(dados: dict[str, Any], exclude_id: int | None = None) -> bool:
    """Checa CRO, CPF e email presentes em ``dados`` contra outros profissionais."""
    condicoes = [
        getattr(Profissional, campo) == dados[campo]
        for campo in CAMPOS_UNICOS
        if dados.get(campo)
    ]
    if not condicoes:
        return False
    q = Profissional.query.filter(or_(*condicoes))
    if exclude_id is not None:
        q = q.filter(Profissional.id != exclude_id)
    return q.first() is not None


def buscar_profissionais(busca: str = "", especialidade: str = "", status: str = ""):
    query = Profissional.query
    busca = (busca or "").strip()
    if busca:
        like = f"%{busca}%"
        query = query.filter(
            or_(
                Profissional.nome.ilike(like),
                Profissional.cro.contains(busca),
                Profissional.email.ilike(like),
            )
        )
    if especialidade:
        query = query.filter(Profissional.especialidade == especialidade)
    if status:
        query = query.filter(Profissional.status == status)
    return query.order_by(Profissional.nome)


def _normalizar(dados: dict[str, Any]) -> dict[str, Any]:
    if dados.get("email"):
        dados["email"] = dados["email"].lower()
    return dados


@retry_on_busy
def criar_profissional(dados: dict[str, Any]) -> Profissional:
    dados = _normalizar(dados)
    if identidade_em_uso(dados):
        raise ConflictError(DUPLICADO)
    profissional = aplicar_patch(Profissional(), dados)
    profissional.status = "ativo"
    db.session.add(profissional)
    commit_or_conflict(DUPLICADO)
    return profissional


@retry_on_busy
def atualizar_profissional(profissional: Profissional, dados: dict[str, Any]) -> Profissional:
    dados = _normalizar(dados)
    if identidade_em_uso(dados, exclude_id=profissional.id):
        raise ConflictError(DUPLICADO)
    aplicar_patch(profissional, dados)
    commit_or_conflict(DUPLICADO)
    return profissional


@retry_on_busy
def excluir_profissional(profissional: Profissional) -> None:
    vinculado = (
        db.session.query(Agendamento.id)
        .filter(Agendamento.profissional_id == profissional.id)
        .first()
    )
    if vinculado is not None:
        raise ConflictError(
            "Não é possível excluir o profissional pois existem agendamentos vinculados"
        )
    avatar = profissional.avatar_url
    db.session.delete(profissional)
    db.session.commit()
    remove_upload(avatar)


@retry_on_busy
def alterar_status(profissional: Profissional, status: str) -> Profissional:
    profissional.status = status
    db.session.commit()
    return profissional


@retry_on_busy
def _gravar_avatar(profissional: Profissional, url: str) -> None:
    profissional.avatar_url = url
    db.session.commit()


def substituir_avatar(profissional: Profissional, arquivo) -> Profissional:
    antigo = profissional.avatar_url
    novo = save_upload(arquivo, prefixo="avatar-")
    try:
        _gravar_avatar(profissional, novo)
    except DatabaseBusyError:
        remove_upload(novo)
        raise
    if antigo and not remove_upload(antigo):
        logger.info("Avatar anterior do profissional %s não removido", profissional.id)
    return profissional


@retry_on_busy
def remover_avatar(profissional: Profissional) -> None:
    antigo = profissional.avatar_url
    profissional.avatar_url = None
    db.session.commit()
    remove_upload(antigo)
