from datetime import datetime
from functools import wraps

from flask import Blueprint, current_app, g, jsonify, request
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email

from .. import db
from ..api_forms import ApiForm
from ..errors import ForbiddenError, UnauthorizedError
from .models import Usuario
from .tokens import create_access_token, subject_from_header


auth_bp = Blueprint("auth", __name__)


# Rotas liberadas do token: login, bootstrap do 1º admin e saúde
_PUBLIC_PATHS = {"/auth/login", "/usuarios/criar-admin", "/health"}


class LoginForm(ApiForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    senha = PasswordField("Senha", validators=[DataRequired()])


def require_roles(*roles):
    """Decorator para exigir um dos cargos. Sem argumentos => apenas login."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            usuario = getattr(g, "usuario", None)
            if usuario is None:
                raise UnauthorizedError("Login necessário")
            if roles and usuario.cargo not in roles:
                raise ForbiddenError("Sem permissão")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def _is_public(path: str, method: str) -> bool:
    if path in _PUBLIC_PATHS:
        return True
    # Arquivos enviados são servidos publicamente (como estáticos)
    return method in ("GET", "HEAD") and path.startswith("/uploads/") and path != "/uploads/temp"


@auth_bp.before_app_request
def enforce_bearer_token():
    """Exige token Bearer válido em todas as rotas não públicas.

    Com REQUIRE_LOGIN=False o gate é desligado (g.usuario fica None).
    """
    g.usuario = None
    if not current_app.config.get("REQUIRE_LOGIN", True):
        return None
    if _is_public(request.path or "/", request.method):
        return None
    uid = subject_from_header(request.headers.get("Authorization"))
    usuario = db.session.get(Usuario, uid)
    if usuario is None or not usuario.ativo:
        raise UnauthorizedError("Usuário inválido ou inativo")
    g.usuario = usuario
    return None


@auth_bp.route("/login", methods=["POST"])
def login():
    form = LoginForm().validar()
    email = form.email.data.strip().lower()
    usuario = Usuario.query.filter_by(email=email).first()
    if usuario is None:
        current_app.logger.info("Login recusado: email desconhecido %s", email)
        raise UnauthorizedError("Email ou senha incorretos")
    if usuario.is_locked():
        restante = int((usuario.locked_until - datetime.utcnow()).total_seconds() / 60) + 1
        raise UnauthorizedError(f"Usuário bloqueado. Tente novamente em ~{restante} min.")
    if not usuario.check_password(form.senha.data):
        usuario.register_failed_login(
            current_app.config.get("MAX_FAILED_LOGINS", 5),
            current_app.config.get("LOCKOUT_MINUTES", 15),
        )
        db.session.commit()
        if usuario.locked_until:
            current_app.logger.warning("Usuário %s bloqueado após falhas de login", usuario.id)
        raise UnauthorizedError("Email ou senha incorretos")
    if not usuario.ativo:
        raise UnauthorizedError("Usuário inativo")
    usuario.reset_failed_login()
    db.session.commit()
    token = create_access_token(usuario.id)
    return jsonify(
        {
            "usuario": {
                "id": usuario.id,
                "nome": usuario.nome,
                "email": usuario.email,
                "cargo": usuario.cargo,
            },
            "token": token,
        }
    )


@auth_bp.route("/me")
@require_roles()
def me():
    return jsonify(g.usuario.to_dict())
