from flask import Blueprint, jsonify, request

from ..agendamentos.models import Agendamento
from ..prontuarios import odontograma
from ..prontuarios.forms import ProcedimentoOdontogramaForm
from ..utils_db import get_or_404, page_args, paginate
from .forms import AvatarForm, PacienteForm, StatusForm
from .models import Paciente
from . import services

pacientes_bp = Blueprint("pacientes", __name__)

NAO_ENCONTRADO = "Paciente não encontrado"


@pacientes_bp.route("/", methods=["GET"])
def listar():
    page, limit = page_args("PACIENTES_PAGE_LIMIT")
    query = services.buscar_pacientes(
        busca=request.args.get("busca", ""),
        status=request.args.get("status") or "ativo",
    )
    return jsonify(paginate(query, page, limit, Paciente.resumo))


@pacientes_bp.route("/<int:paciente_id>", methods=["GET"])
def visualizar(paciente_id: int):
    paciente = get_or_404(Paciente, paciente_id, NAO_ENCONTRADO)
    recentes = (
        Agendamento.query.filter_by(paciente_id=paciente.id)
        .order_by(Agendamento.data.desc(), Agendamento.hora_inicio.desc())
        .limit(5)
        .all()
    )
    data = paciente.to_dict()
    data["agendamentos"] = [a.to_dict() for a in recentes]
    return jsonify(data)


@pacientes_bp.route("/", methods=["POST"])
def novo():
    form = PacienteForm().validar()
    paciente = services.criar_paciente(form.dados())
    return jsonify(paciente.to_dict()), 201


@pacientes_bp.route("/<int:paciente_id>", methods=["PUT"])
def editar(paciente_id: int):
    paciente = get_or_404(Paciente, paciente_id, NAO_ENCONTRADO)
    form = PacienteForm(partial=True).validar()
    services.atualizar_paciente(paciente, form.dados())
    return jsonify(paciente.to_dict())


@pacientes_bp.route("/<int:paciente_id>", methods=["DELETE"])
def excluir(paciente_id: int):
    paciente = get_or_404(Paciente, paciente_id, NAO_ENCONTRADO)
    services.excluir_paciente(paciente)
    return "", 204


@pacientes_bp.route("/<int:paciente_id>/status", methods=["PATCH"])
def status(paciente_id: int):
    paciente = get_or_404(Paciente, paciente_id, NAO_ENCONTRADO)
    form = StatusForm().validar()
    services.alterar_status(paciente, form.status.data)
    return jsonify(paciente.to_dict())


@pacientes_bp.route("/<int:paciente_id>/avatar", methods=["PATCH"])
def avatar(paciente_id: int):
    paciente = get_or_404(Paciente, paciente_id, NAO_ENCONTRADO)
    form = AvatarForm().validar()
    services.substituir_avatar(paciente, form.avatar.data)
    return jsonify(paciente.to_dict())


# ===== Odontograma (por prontuário) =====
@pacientes_bp.route("/<int:paciente_id>/prontuario/<int:prontuario_id>/odontograma", methods=["GET"])
def ver_odontograma(paciente_id: int, prontuario_id: int):
    return jsonify(odontograma.get_chart(paciente_id, prontuario_id))


@pacientes_bp.route("/<int:paciente_id>/prontuario/<int:prontuario_id>/odontograma", methods=["POST"])
def adicionar_procedimento(paciente_id: int, prontuario_id: int):
    form = ProcedimentoOdontogramaForm().validar()
    procedimento = odontograma.add_procedure(paciente_id, prontuario_id, form.dados())
    return jsonify(procedimento.to_dict()), 201
