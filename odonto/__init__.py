"""API OdontoClinic: extensões globais e fábrica Flask.

Blueprints e models são importados dentro de ``create_app`` porque todos
importam ``db`` deste módulo.
"""

import logging
import os
import sqlite3
from importlib import import_module

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_sqlalchemy.session import Session as FsaSession
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from .errors import DatabaseBusyError, is_sqlite_busy

retry_logger = logging.getLogger("db.retry")


class BusyAwareSession(FsaSession):
    """Session que converte bloqueio do SQLite em ``DatabaseBusyError``.

    O commit não é repetido aqui: a falha no flush desfaz a transação e
    descarta os objetos pendentes, então repetir só o commit gravaria
    nada. Quem quiser nova tentativa re-executa a unidade de trabalho
    inteira (``utils_db.retry_on_busy``).
    """

    def commit(self) -> None:  # type: ignore[override]
        try:
            super().commit()
        except OperationalError as exc:
            if not is_sqlite_busy(exc):
                raise
            self.rollback()
            retry_logger.warning("Commit recusado, SQLite ocupado: %s", exc)
            raise DatabaseBusyError() from exc


db = SQLAlchemy(session_options={"class_": BusyAwareSession})


def _install_sqlite_pragmas(app: Flask) -> None:
    """WAL, foreign_keys, busy_timeout e synchronous=NORMAL em cada conexão SQLite."""
    busy_ms = int(app.config.get("SQLITE_BUSY_TIMEOUT_MS", 1000))

    def _on_connect(dbapi_connection, connection_record):  # pragma: no cover - infra
        if not isinstance(dbapi_connection, sqlite3.Connection):
            return
        cur = dbapi_connection.cursor()
        try:
            cur.execute("PRAGMA journal_mode=WAL")
        except sqlite3.DatabaseError:
            # bancos em memória não aceitam WAL
            pass
        cur.execute("PRAGMA foreign_keys=ON")
        cur.execute(f"PRAGMA busy_timeout={busy_ms}")
        cur.execute("PRAGMA synchronous=NORMAL")
        cur.close()

    with app.app_context():
        for engine in db.engines.values():
            if engine.dialect.name == "sqlite":
                event.listen(engine, "connect", _on_connect)


def _configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL") or "INFO").upper()
    app.logger.setLevel(level)
    logging.getLogger("odonto").setLevel(level)


_MODELOS = (
    ".agendamentos.models",
    ".auth.models",
    ".configuracoes.models",
    ".documentos.models",
    ".financeiro.models",
    ".pacientes.models",
    ".profissionais.models",
    ".prontuarios.models",
)


def _import_models() -> None:
    """Registra todas as tabelas no metadata (create_all e Alembic)."""
    for modulo in _MODELOS:
        import_module(modulo, __name__)


# (módulo, atributo, prefixo de URL)
_BLUEPRINTS = (
    (".auth.auth", "auth_bp", "/auth"),
    (".usuarios.usuarios", "usuarios_bp", "/usuarios"),
    (".pacientes.pacientes", "pacientes_bp", "/pacientes"),
    (".profissionais.profissionais", "profissionais_bp", "/profissionais"),
    (".agendamentos.agendamentos", "agendamentos_bp", "/agendamentos"),
    (".prontuarios.prontuarios", "prontuarios_bp", "/prontuarios"),
    (".financeiro.financeiro", "financeiro_bp", "/financeiro"),
    (".documentos.documentos", "documentos_bp", "/documentos"),
    (".configuracoes.configuracoes", "configuracoes_bp", "/configuracoes"),
    (".dashboard.dashboard", "dashboard_bp", "/dashboard"),
    (".uploads", "uploads_bp", "/uploads"),
)


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    # Config padrão base
    app.config.from_object("config.Config")

    # Override opcional
    if config_object:
        app.config.from_object(config_object)

    # Garante existência da pasta instance e de uploads
    os.makedirs(app.instance_path, exist_ok=True)
    if not app.config.get("UPLOAD_FOLDER"):
        app.config["UPLOAD_FOLDER"] = os.path.join(app.instance_path, "uploads")
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    _configure_logging(app)

    # Inicializa extensões
    db.init_app(app)
    _install_sqlite_pragmas(app)

    from .errors import register_error_handlers  # noqa: WPS433

    register_error_handlers(app)

    # Coleções respondem com e sem barra final (POST /pacientes sem 308)
    app.url_map.strict_slashes = False

    # Importação tardia: cada módulo de rotas importa models que dependem de ``db``
    for modulo, nome, prefixo in _BLUEPRINTS:
        blueprint = getattr(import_module(modulo, __name__), nome)
        app.register_blueprint(blueprint, url_prefix=prefixo)

    from .cli import register_cli  # noqa: WPS433

    register_cli(app)

    # Migrações Alembic (opcional) antes de fallback create_all
    if not app.config.get("TESTING") and app.config.get("AUTO_ALEMBIC_UPGRADE"):
        with app.app_context():  # pragma: no cover - infra
            from alembic import command as alembic_command
            from alembic.config import Config as AlembicConfig

            alembic_cfg = AlembicConfig(os.path.join(app.root_path, os.pardir, "alembic.ini"))
            alembic_command.upgrade(alembic_cfg, "head")
    elif app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            _import_models()
            db.create_all()

    @app.route("/health")
    def health():  # pragma: no cover - endpoint trivial
        return {"status": "ok"}

    return app
