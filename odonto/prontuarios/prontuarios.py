from flask import Blueprint, jsonify, request

from .. import db
from ..errors import NotFoundError, ValidationError
from ..pacientes.models import Paciente
from ..utils_db import get_or_404, page_args, paginate, retry_on_busy
from .forms import ProntuarioForm
from .models import Odontograma, Prontuario

prontuarios_bp = Blueprint("prontuarios", __name__)

NAO_ENCONTRADO = "Prontuário não encontrado"
CAMPOS_EDITAVEIS = ("paciente_id", "descricao", "procedimento", "observacoes")


def _exigir_paciente(paciente_id: int) -> None:
    if db.session.get(Paciente, paciente_id) is None:
        raise NotFoundError("Paciente não encontrado")


@prontuarios_bp.route("/", methods=["GET"])
def listar():
    paciente_id = request.args.get("paciente_id", type=int)
    if not paciente_id:
        raise ValidationError({"paciente_id": ["Informe o paciente"]})
    page, limit = page_args()
    query = Prontuario.query.filter_by(paciente_id=paciente_id).order_by(Prontuario.data.desc())
    return jsonify(paginate(query, page, limit, Prontuario.to_dict))


@prontuarios_bp.route("/paciente/<int:paciente_id>", methods=["GET"])
def do_paciente(paciente_id: int):
    prontuarios = (
        Prontuario.query.filter_by(paciente_id=paciente_id).order_by(Prontuario.data.desc()).all()
    )
    return jsonify([p.to_dict() for p in prontuarios])


@prontuarios_bp.route("/<int:prontuario_id>", methods=["GET"])
def visualizar(prontuario_id: int):
    prontuario = get_or_404(Prontuario, prontuario_id, NAO_ENCONTRADO)
    return jsonify(prontuario.to_dict(incluir_paciente=True))


@prontuarios_bp.route("/", methods=["POST"])
@retry_on_busy
def novo():
    dados = ProntuarioForm().validar().dados()
    _exigir_paciente(dados["paciente_id"])
    prontuario = Prontuario(**{c: dados.get(c) for c in CAMPOS_EDITAVEIS})
    db.session.add(prontuario)
    db.session.commit()
    return jsonify(prontuario.to_dict(incluir_paciente=True)), 201


@prontuarios_bp.route("/<int:prontuario_id>", methods=["PUT"])
@retry_on_busy
def editar(prontuario_id: int):
    prontuario = get_or_404(Prontuario, prontuario_id, NAO_ENCONTRADO)
    dados = ProntuarioForm(partial=True).validar().dados()
    if "paciente_id" in dados:
        _exigir_paciente(dados["paciente_id"])
    for campo in CAMPOS_EDITAVEIS:
        if campo in dados:
            setattr(prontuario, campo, dados[campo])
    db.session.commit()
    return jsonify(prontuario.to_dict(incluir_paciente=True))


@prontuarios_bp.route("/<int:prontuario_id>", methods=["DELETE"])
@retry_on_busy
def excluir(prontuario_id: int):
    prontuario = get_or_404(Prontuario, prontuario_id, NAO_ENCONTRADO)
    # Ficha e procedimentos saem antes do prontuário
    odontograma = Odontograma.query.filter_by(prontuario_id=prontuario.id).first()
    if odontograma is not None:
        db.session.delete(odontograma)
        db.session.flush()
    db.session.delete(prontuario)
    db.session.commit()
    return "", 204
