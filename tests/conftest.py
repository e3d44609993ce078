import os
import sys
import tempfile

import pytest

# Ensure project root (parent of tests) is on sys.path before importing odonto
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from odonto import create_app, db  # noqa: E402


@pytest.fixture()
def app():
    # Configuração isolada: banco e pasta de uploads temporários
    tmpdir = tempfile.TemporaryDirectory()
    instance = tmpdir.name

    class TestConfig:
        TESTING = True
        SECRET_KEY = "test"
        JWT_SECRET = "test-jwt"
        REQUIRE_LOGIN = True
        ALLOW_ADMIN_BOOTSTRAP = True
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + os.path.join(instance, "main.db")
        SQLALCHEMY_TRACK_MODIFICATIONS = False
        UPLOAD_FOLDER = os.path.join(instance, "uploads")
        AUTO_CREATE_TABLES = True
        AUTO_ALEMBIC_UPGRADE = False
        VALIDATE_CPF_CHECK_DIGITS = False

    flask_app = create_app(TestConfig)
    yield flask_app
    # Libera conexões para evitar lock em Windows ao remover diretório
    with flask_app.app_context():
        db.session.remove()
        db.engine.dispose()
    tmpdir.cleanup()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def admin(app):
    """Conta admin persistida; retorna o id."""
    from odonto.auth.models import Usuario

    with app.app_context():
        u = Usuario(nome="Admin Teste", email="admin@clinica.com", cargo="admin", ativo=True)
        u.set_password("segredo123")
        db.session.add(u)
        db.session.commit()
        return u.id


@pytest.fixture()
def auth_headers(app, admin):
    from odonto.auth.tokens import create_access_token

    with app.app_context():
        token = create_access_token(admin)
    return {"Authorization": f"Bearer {token}"}


PACIENTE = {
    "nome": "Maria da Silva",
    "cpf": "123.456.789-00",
    "data_nascimento": "1990-05-10",
    "telefone_celular": "(11) 98888-7777",
    "email": "maria@example.com",
}

PROFISSIONAL = {
    "nome": "Dr. João Souza",
    "email": "joao@clinica.com",
    "telefone": "(11) 3333-4444",
    "cro": "SP-12345",
    "especialidade": "ORTODONTISTA",
    "data_nascimento": "1980-01-20",
    "cpf": "987.654.321-00",
}


@pytest.fixture()
def novo_paciente(client, auth_headers):
    def _criar(**campos):
        payload = {**PACIENTE, **campos}
        resp = client.post("/pacientes/", json=payload, headers=auth_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _criar


@pytest.fixture()
def novo_profissional(client, auth_headers):
    def _criar(**campos):
        payload = {**PROFISSIONAL, **campos}
        resp = client.post("/profissionais/", json=payload, headers=auth_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _criar
