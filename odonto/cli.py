"""Comandos ``flask`` de manutenção.

Uso:
    flask --app odonto criar-admin --email admin@clinica.com --senha segredo
"""

from __future__ import annotations

import click
from flask import Flask

from . import db


def criar_admin(email: str, senha: str, nome: str = "Administrador"):
    """Cria conta admin; retorna None se o email já estiver em uso."""
    from .auth.models import Usuario

    email = email.strip().lower()
    if Usuario.query.filter_by(email=email).first() is not None:
        return None
    admin = Usuario(nome=nome, email=email, cargo="admin", ativo=True)
    admin.set_password(senha)
    db.session.add(admin)
    db.session.commit()
    return admin


def register_cli(app: Flask) -> None:
    @app.cli.command("criar-admin")
    @click.option("--email", required=True, help="Email de login do administrador")
    @click.option("--senha", required=True, help="Senha inicial")
    @click.option("--nome", default="Administrador", show_default=True)
    def criar_admin_command(email: str, senha: str, nome: str) -> None:
        minimo = app.config.get("PASSWORD_MIN_LENGTH", 6)
        if len(senha) < minimo:
            raise click.BadParameter(f"Senha deve ter ao menos {minimo} caracteres", param_hint="--senha")
        admin = criar_admin(email, senha, nome)
        if admin is None:
            click.echo(f"Já existe usuário com o email {email.strip().lower()}.")
            return
        click.echo(f"Administrador criado: {admin.email} (id={admin.id})")
