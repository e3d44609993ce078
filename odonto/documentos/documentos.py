from flask import Blueprint, jsonify
from flask_wtf.file import FileField, FileRequired
from wtforms import IntegerField, StringField
from wtforms.validators import DataRequired, Length

from .. import db
from ..api_forms import UploadForm
from ..errors import DatabaseBusyError, NotFoundError
from ..pacientes.models import Paciente
from ..uploads import remove_upload, save_upload
from ..utils_db import get_or_404, retry_on_busy
from .models import Documento

documentos_bp = Blueprint("documentos", __name__)


class DocumentoForm(UploadForm):
    paciente_id = IntegerField("Paciente", validators=[DataRequired()])
    nome = StringField("Nome", validators=[DataRequired(), Length(max=200)])
    tipo = StringField("Tipo", validators=[DataRequired(), Length(max=50)])
    arquivo = FileField("Arquivo", validators=[FileRequired("Arquivo não enviado")])


@documentos_bp.route("/paciente/<int:paciente_id>", methods=["GET"])
def do_paciente(paciente_id: int):
    documentos = (
        Documento.query.filter_by(paciente_id=paciente_id)
        .order_by(Documento.created_at.desc(), Documento.id.desc())
        .all()
    )
    return jsonify([d.to_dict() for d in documentos])


@retry_on_busy
def _registrar(paciente_id: int, nome: str, tipo: str, url: str) -> Documento:
    if db.session.get(Paciente, paciente_id) is None:
        raise NotFoundError("Paciente não encontrado")
    documento = Documento(paciente_id=paciente_id, nome=nome, tipo=tipo, url=url)
    db.session.add(documento)
    db.session.commit()
    return documento


@documentos_bp.route("/", methods=["POST"])
def enviar():
    form = DocumentoForm().validar()
    if db.session.get(Paciente, form.paciente_id.data) is None:
        raise NotFoundError("Paciente não encontrado")
    url = save_upload(form.arquivo.data)
    try:
        documento = _registrar(
            form.paciente_id.data, form.nome.data.strip(), form.tipo.data.strip(), url
        )
    except (DatabaseBusyError, NotFoundError):
        remove_upload(url)
        raise
    return jsonify(documento.to_dict()), 201


@documentos_bp.route("/<int:documento_id>", methods=["DELETE"])
@retry_on_busy
def excluir(documento_id: int):
    documento = get_or_404(Documento, documento_id, "Documento não encontrado")
    url = documento.url
    db.session.delete(documento)
    db.session.commit()
    remove_upload(url)
    return "", 204
