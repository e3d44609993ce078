from flask import Blueprint, jsonify, request

from ..utils_db import get_or_404, page_args, paginate
from .forms import AvatarForm, ProfissionalForm, StatusForm
from .models import Profissional
from . import services

profissionais_bp = Blueprint("profissionais", __name__)

NAO_ENCONTRADO = "Profissional não encontrado"


@profissionais_bp.route("/lista", methods=["GET"])
def lista():
    """Lista compacta (id, nome, status) para selects do frontend."""
    profissionais = Profissional.query.order_by(Profissional.nome).all()
    return jsonify([p.resumo() for p in profissionais])


@profissionais_bp.route("/", methods=["GET"])
def listar():
    page, limit = page_args()
    query = services.buscar_profissionais(
        busca=request.args.get("busca", ""),
        especialidade=request.args.get("especialidade", ""),
        status=request.args.get("status", ""),
    )
    return jsonify(paginate(query, page, limit, Profissional.to_dict))


@profissionais_bp.route("/<int:profissional_id>", methods=["GET"])
def visualizar(profissional_id: int):
    return jsonify(get_or_404(Profissional, profissional_id, NAO_ENCONTRADO).to_dict())


@profissionais_bp.route("/", methods=["POST"])
def novo():
    form = ProfissionalForm().validar()
    profissional = services.criar_profissional(form.dados())
    return jsonify(profissional.to_dict()), 201


@profissionais_bp.route("/<int:profissional_id>", methods=["PUT"])
def editar(profissional_id: int):
    profissional = get_or_404(Profissional, profissional_id, NAO_ENCONTRADO)
    form = ProfissionalForm(partial=True).validar()
    services.atualizar_profissional(profissional, form.dados())
    return jsonify(profissional.to_dict())


@profissionais_bp.route("/<int:profissional_id>", methods=["DELETE"])
def excluir(profissional_id: int):
    profissional = get_or_404(Profissional, profissional_id, NAO_ENCONTRADO)
    services.excluir_profissional(profissional)
    return "", 204


@profissionais_bp.route("/<int:profissional_id>/status", methods=["PATCH"])
def status(profissional_id: int):
    profissional = get_or_404(Profissional, profissional_id, NAO_ENCONTRADO)
    form = StatusForm().validar()
    services.alterar_status(profissional, form.status.data)
    return jsonify(profissional.to_dict())


@profissionais_bp.route("/<int:profissional_id>/avatar", methods=["PATCH"])
def avatar(profissional_id: int):
    profissional = get_or_404(Profissional, profissional_id, NAO_ENCONTRADO)
    form = AvatarForm().validar()
    services.substituir_avatar(profissional, form.avatar.data)
    return jsonify(profissional.to_dict())


@profissionais_bp.route("/<int:profissional_id>/avatar", methods=["DELETE"])
def remover_avatar(profissional_id: int):
    profissional = get_or_404(Profissional, profissional_id, NAO_ENCONTRADO)
    services.remover_avatar(profissional)
    return "", 204
