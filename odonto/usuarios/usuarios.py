from __future__ import annotations

from flask import Blueprint, current_app, g, jsonify
from wtforms import BooleanField, PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional, ValidationError as CampoInvalido

from .. import db
from ..api_forms import ApiForm
from ..auth.auth import require_roles
from ..auth.models import Usuario
from ..errors import ConflictError
from ..utils_db import commit_or_conflict, get_or_404, key_lock, retry_on_busy

usuarios_bp = Blueprint("usuarios", __name__)

CARGOS = ("admin", "dentista", "recepcao", "financeiro")


def _senha_minima(form, field):
    if field.data is None:
        return
    minimo = current_app.config.get("PASSWORD_MIN_LENGTH", 6)
    if len(field.data) < minimo:
        raise CampoInvalido(f"Senha deve ter ao menos {minimo} caracteres")


class UsuarioForm(ApiForm):
    nome = StringField("Nome", validators=[DataRequired(), Length(min=3, max=128)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    senha = PasswordField("Senha", validators=[DataRequired(), _senha_minima])
    cargo = SelectField("Cargo", choices=[(c, c) for c in CARGOS], default="dentista")
    ativo = BooleanField("Ativo")


class BootstrapAdminForm(ApiForm):
    nome = StringField("Nome", validators=[Optional(), Length(min=3, max=128)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    senha = PasswordField("Senha", validators=[DataRequired(), _senha_minima])


def _email_em_uso(email: str, exclude_id: int | None = None) -> bool:
    q = Usuario.query.filter(Usuario.email == email)
    if exclude_id is not None:
        q = q.filter(Usuario.id != exclude_id)
    return q.first() is not None


@usuarios_bp.route("/criar-admin", methods=["POST"])
def criar_admin():
    """Cria a primeira conta (admin). Desabilita-se quando já existe conta."""
    if not current_app.config.get("ALLOW_ADMIN_BOOTSTRAP", True):
        raise ConflictError("Criação de administrador inicial desabilitada")
    form = BootstrapAdminForm().validar()
    dados = form.dados()
    # contagem e insert sob o mesmo lock: duas chamadas simultâneas não criam 2 admins
    with key_lock("bootstrap-admin"):
        if Usuario.query.count() > 0:
            raise ConflictError("Já existe um usuário administrador")
        admin = Usuario()
        admin.nome = dados.get("nome") or "Administrador"
        admin.email = dados["email"].lower()
        admin.cargo = "admin"
        admin.set_password(form.senha.data)
        db.session.add(admin)
        commit_or_conflict("Já existe um usuário administrador")
    current_app.logger.info("Administrador inicial criado (id=%s)", admin.id)
    return jsonify(admin.to_dict()), 201


@usuarios_bp.route("/", methods=["GET"])
@require_roles("admin")
def listar():
    usuarios = Usuario.query.order_by(Usuario.nome).all()
    return jsonify([u.to_dict() for u in usuarios])


@usuarios_bp.route("/<int:uid>", methods=["GET"])
@require_roles("admin")
def obter(uid: int):
    return jsonify(get_or_404(Usuario, uid, "Usuário não encontrado").to_dict())


@usuarios_bp.route("/", methods=["POST"])
@require_roles("admin")
@retry_on_busy
def criar():
    form = UsuarioForm().validar()
    dados = form.dados()
    email = dados["email"].lower()
    if _email_em_uso(email):
        raise ConflictError("Email já cadastrado")
    u = Usuario()
    u.nome = dados["nome"]
    u.email = email
    u.cargo = dados.get("cargo") or "dentista"
    u.set_password(form.senha.data)
    db.session.add(u)
    commit_or_conflict("Email já cadastrado")
    return jsonify(u.to_dict()), 201


@usuarios_bp.route("/<int:uid>", methods=["PUT"])
@require_roles("admin")
@retry_on_busy
def atualizar(uid: int):
    u = get_or_404(Usuario, uid, "Usuário não encontrado")
    form = UsuarioForm(partial=True).validar()
    dados = form.dados()
    if "email" in dados:
        email = dados["email"].lower()
        if _email_em_uso(email, exclude_id=u.id):
            raise ConflictError("Email já cadastrado")
        u.email = email
    if "nome" in dados:
        u.nome = dados["nome"]
    if "cargo" in dados:
        u.cargo = dados["cargo"]
    if "ativo" in dados:
        u.ativo = bool(dados["ativo"])
    if "senha" in dados:
        u.set_password(form.senha.data)
    commit_or_conflict("Email já cadastrado")
    return jsonify(u.to_dict())


@usuarios_bp.route("/<int:uid>", methods=["DELETE"])
@require_roles("admin")
@retry_on_busy
def excluir(uid: int):
    u = get_or_404(Usuario, uid, "Usuário não encontrado")
    if u.id == g.usuario.id:
        raise ConflictError("Não é possível excluir o próprio usuário")
    db.session.delete(u)
    db.session.commit()
    return "", 204
