"""Serviços de domínio para o módulo pacientes.

Mantém regras de negócio fora das rotas para facilitar testes: unicidade de
CPF, merge explícito de atualizações parciais e bloqueio de exclusão quando
há registros vinculados.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import or_

from .. import db
from ..agendamentos.models import Agendamento
from ..documentos.models import Documento
from ..errors import ConflictError, DatabaseBusyError
from ..prontuarios.models import Prontuario
from ..uploads import remove_upload, save_upload
from ..utils_db import commit_or_conflict, retry_on_busy
from .models import Paciente

logger = logging.getLogger(__name__)

CPF_DUPLICADO = "CPF já cadastrado"

# Campos aceitos em criação/atualização (status e avatar têm rotas próprias)
CAMPOS_EDITAVEIS = (
    "nome",
    "cpf",
    "data_nascimento",
    "genero",
    "email",
    "telefone_celular",
    "telefone_fixo",
    "cep",
    "logradouro",
    "numero",
    "complemento",
    "bairro",
    "cidade",
    "estado",
    "contato_emergencia_nome",
    "contato_emergencia_telefone",
    "contato_emergencia_parentesco",
    "historico_medico",
)


def aplicar_patch(paciente: Paciente, dados: dict[str, Any]) -> Paciente:
    """Aplica campo a campo apenas o que veio no payload."""
    for campo in CAMPOS_EDITAVEIS:
        if campo in dados:
            setattr(paciente, campo, dados[campo])
    return paciente


def cpf_existe(cpf_normalizado: str, exclude_id: int | None = None) -> bool:
    """Retorna True se o CPF já pertence a outro paciente (ativo ou inativo)."""
    q = Paciente.query.filter(Paciente.cpf == cpf_normalizado)
    if exclude_id is not None:
        q = q.filter(Paciente.id != exclude_id)
    return q.first() is not None


def buscar_pacientes(busca: str = "", status: str | None = "ativo"):
    query = Paciente.query
    if status and status != "todos":
        query = query.filter(Paciente.status == status)
    busca = (busca or "").strip()
    if busca:
        like = f"%{busca}%"
        query = query.filter(
            or_(
                Paciente.nome.ilike(like),
                Paciente.cpf.contains(busca),
                Paciente.telefone_celular.contains(busca),
            )
        )
    return query.order_by(Paciente.nome)


@retry_on_busy
def criar_paciente(dados: dict[str, Any]) -> Paciente:
    if cpf_existe(dados["cpf"]):
        raise ConflictError(CPF_DUPLICADO)
    paciente = aplicar_patch(Paciente(), dados)
    paciente.status = "ativo"
    db.session.add(paciente)
    commit_or_conflict(CPF_DUPLICADO)
    return paciente


@retry_on_busy
def atualizar_paciente(paciente: Paciente, dados: dict[str, Any]) -> Paciente:
    if dados.get("cpf") and cpf_existe(dados["cpf"], exclude_id=paciente.id):
        raise ConflictError(CPF_DUPLICADO)
    aplicar_patch(paciente, dados)
    commit_or_conflict(CPF_DUPLICADO)
    return paciente


def possui_vinculos(paciente_id: int) -> bool:
    tem_agendamento = (
        db.session.query(Agendamento.id).filter(Agendamento.paciente_id == paciente_id).first()
    )
    tem_prontuario = (
        db.session.query(Prontuario.id).filter(Prontuario.paciente_id == paciente_id).first()
    )
    return tem_agendamento is not None or tem_prontuario is not None


@retry_on_busy
def excluir_paciente(paciente: Paciente) -> None:
    if possui_vinculos(paciente.id):
        raise ConflictError("Não é possível excluir o paciente pois existem registros vinculados")
    arquivos = [paciente.avatar_url]
    # documentos anexados saem junto; lançamentos financeiros ficam sem paciente (SET NULL)
    for documento in Documento.query.filter_by(paciente_id=paciente.id).all():
        arquivos.append(documento.url)
        db.session.delete(documento)
    db.session.flush()
    db.session.delete(paciente)
    db.session.commit()
    for url in arquivos:
        remove_upload(url)


@retry_on_busy
def alterar_status(paciente: Paciente, status: str) -> Paciente:
    paciente.status = status
    db.session.commit()
    return paciente


@retry_on_busy
def _gravar_avatar(paciente: Paciente, url: str) -> None:
    paciente.avatar_url = url
    db.session.commit()


def substituir_avatar(paciente: Paciente, arquivo) -> Paciente:
    """Grava o novo avatar e remove o anterior (best-effort)."""
    antigo = paciente.avatar_url
    novo = save_upload(arquivo, prefixo="avatar-")
    try:
        _gravar_avatar(paciente, novo)
    except DatabaseBusyError:
        remove_upload(novo)
        raise
    if antigo and not remove_upload(antigo):
        logger.info("Avatar anterior do paciente %s não removido", paciente.id)
    return paciente
