from datetime import date

from flask import Blueprint, jsonify, request

from ..utils_db import date_arg, get_or_404, page_args, paginate
from .forms import AgendamentoForm, StatusAgendamentoForm
from .models import Agendamento
from . import services

agendamentos_bp = Blueprint("agendamentos", __name__)

NAO_ENCONTRADO = "Agendamento não encontrado"


@agendamentos_bp.route("/hoje", methods=["GET"])
def hoje():
    return jsonify([a.to_dict() for a in services.agendamentos_do_dia(date.today())])


@agendamentos_bp.route("/proximos", methods=["GET"])
def proximos():
    return jsonify([a.to_dict() for a in services.proximos_agendamentos(date.today())])


@agendamentos_bp.route("/", methods=["GET"])
def listar():
    page, limit = page_args()
    query = services.listar_agendamentos(
        dia=date_arg("data"),
        profissional_id=request.args.get("profissional_id", type=int),
        paciente_id=request.args.get("paciente_id", type=int),
        status=request.args.get("status", ""),
    )
    return jsonify(paginate(query, page, limit, Agendamento.to_dict))


@agendamentos_bp.route("/<int:agendamento_id>", methods=["GET"])
def visualizar(agendamento_id: int):
    return jsonify(get_or_404(Agendamento, agendamento_id, NAO_ENCONTRADO).to_dict())


@agendamentos_bp.route("/", methods=["POST"])
def novo():
    form = AgendamentoForm().validar()
    agendamento = services.criar_agendamento(form.dados())
    return jsonify(agendamento.to_dict()), 201


@agendamentos_bp.route("/<int:agendamento_id>", methods=["PUT"])
def editar(agendamento_id: int):
    agendamento = get_or_404(Agendamento, agendamento_id, NAO_ENCONTRADO)
    form = AgendamentoForm(partial=True).validar()
    services.atualizar_agendamento(agendamento, form.dados())
    return jsonify(agendamento.to_dict())


@agendamentos_bp.route("/<int:agendamento_id>/status", methods=["PATCH"])
def status(agendamento_id: int):
    agendamento = get_or_404(Agendamento, agendamento_id, NAO_ENCONTRADO)
    form = StatusAgendamentoForm().validar()
    services.alterar_status(agendamento, form.status.data)
    return jsonify(agendamento.to_dict())


@agendamentos_bp.route("/<int:agendamento_id>", methods=["DELETE"])
def excluir(agendamento_id: int):
    agendamento = get_or_404(Agendamento, agendamento_id, NAO_ENCONTRADO)
    services.excluir_agendamento(agendamento)
    return "", 204
