from __future__ import annotations

from logging.config import fileConfig
from typing import Any

from flask import current_app, has_app_context

from alembic import context as _context  # type: ignore[attr-defined]

# Expose name 'context' with flexible typing for attribute access used by Alembic
context: Any = _context

# This is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

if config.config_file_name is not None and not has_app_context():
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def get_app():
    # Chamado de dentro do create_app (AUTO_ALEMBIC_UPGRADE): reaproveita o app ativo
    if has_app_context():
        return current_app._get_current_object()
    from odonto import create_app

    class _SemAutoSchema:
        AUTO_ALEMBIC_UPGRADE = False
        AUTO_CREATE_TABLES = False

    return create_app(_SemAutoSchema)


app = get_app()


def _target_metadata():
    from odonto import _import_models, db

    _import_models()
    return db.metadata


def run_migrations_offline() -> None:
    with app.app_context():
        context.configure(
            url=app.config["SQLALCHEMY_DATABASE_URI"],
            target_metadata=_target_metadata(),
            literal_binds=True,
            render_as_batch=True,
            dialect_opts={"paramstyle": "named"},
        )
        with context.begin_transaction():
            context.run_migrations()


def run_migrations_online() -> None:
    from odonto import db as _db

    with app.app_context():
        with _db.engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=_target_metadata(),
                render_as_batch=True,
            )
            with context.begin_transaction():
                context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
