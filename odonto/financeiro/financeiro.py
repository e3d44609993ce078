from flask import Blueprint, jsonify, request
from sqlalchemy import or_

from .. import db
from ..errors import NotFoundError
from ..pacientes.models import Paciente
from ..utils_db import date_arg, get_or_404, page_args, paginate, retry_on_busy
from .forms import LancamentoForm
from .models import LancamentoFinanceiro

financeiro_bp = Blueprint("financeiro", __name__)

NAO_ENCONTRADO = "Lançamento não encontrado"
CAMPOS_EDITAVEIS = (
    "tipo",
    "categoria",
    "descricao",
    "valor",
    "data",
    "status",
    "forma_pagamento",
    "paciente_id",
)


def _aplicar(lancamento: LancamentoFinanceiro, dados: dict) -> LancamentoFinanceiro:
    if (
        dados.get("paciente_id") is not None
        and db.session.get(Paciente, dados["paciente_id"]) is None
    ):
        raise NotFoundError("Paciente não encontrado")
    for campo in CAMPOS_EDITAVEIS:
        if campo in dados:
            setattr(lancamento, campo, dados[campo])
    return lancamento


@financeiro_bp.route("/", methods=["GET"])
def listar():
    page, limit = page_args()
    query = LancamentoFinanceiro.query
    busca = (request.args.get("busca") or "").strip()
    if busca:
        like = f"%{busca}%"
        query = query.filter(
            or_(
                LancamentoFinanceiro.descricao.ilike(like),
                LancamentoFinanceiro.categoria.ilike(like),
            )
        )
    if request.args.get("tipo"):
        query = query.filter(LancamentoFinanceiro.tipo == request.args["tipo"])
    if request.args.get("status"):
        query = query.filter(LancamentoFinanceiro.status == request.args["status"])
    inicio, fim = date_arg("data_inicio"), date_arg("data_fim")
    if inicio:
        query = query.filter(LancamentoFinanceiro.data >= inicio)
    if fim:
        query = query.filter(LancamentoFinanceiro.data <= fim)
    query = query.order_by(LancamentoFinanceiro.data.desc(), LancamentoFinanceiro.id.desc())
    return jsonify(paginate(query, page, limit, LancamentoFinanceiro.to_dict))


@financeiro_bp.route("/<int:lancamento_id>", methods=["GET"])
def visualizar(lancamento_id: int):
    return jsonify(get_or_404(LancamentoFinanceiro, lancamento_id, NAO_ENCONTRADO).to_dict())


@financeiro_bp.route("/", methods=["POST"])
@retry_on_busy
def novo():
    dados = LancamentoForm().validar().dados()
    lancamento = _aplicar(LancamentoFinanceiro(), dados)
    db.session.add(lancamento)
    db.session.commit()
    return jsonify(lancamento.to_dict()), 201


@financeiro_bp.route("/<int:lancamento_id>", methods=["PUT"])
@retry_on_busy
def editar(lancamento_id: int):
    lancamento = get_or_404(LancamentoFinanceiro, lancamento_id, NAO_ENCONTRADO)
    dados = LancamentoForm(partial=True).validar().dados()
    _aplicar(lancamento, dados)
    db.session.commit()
    return jsonify(lancamento.to_dict())


@financeiro_bp.route("/<int:lancamento_id>", methods=["DELETE"])
@retry_on_busy
def excluir(lancamento_id: int):
    lancamento = get_or_404(LancamentoFinanceiro, lancamento_id, NAO_ENCONTRADO)
    db.session.delete(lancamento)
    db.session.commit()
    return "", 204
