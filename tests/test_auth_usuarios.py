from datetime import datetime, timedelta, timezone

import jwt

from odonto import db
from odonto.auth.models import Usuario


def _login(client, email="admin@clinica.com", senha="segredo123"):
    return client.post("/auth/login", json={"email": email, "senha": senha})


def test_rotas_exigem_token(client):
    resp = client.get("/pacientes/")
    assert resp.status_code == 401
    assert resp.get_json()["message"]


def test_token_invalido_e_mal_formatado(client, admin):
    assert client.get("/pacientes/", headers={"Authorization": "Bearer abc"}).status_code == 401
    assert client.get("/pacientes/", headers={"Authorization": "Token abc"}).status_code == 401


def test_token_expirado(app, client, admin):
    agora = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": str(admin), "iat": agora - timedelta(hours=2), "exp": agora - timedelta(hours=1)},
        app.config["JWT_SECRET"],
        algorithm="HS256",
    )
    resp = client.get("/pacientes/", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Token expirado"


def test_rotas_publicas(client):
    assert client.get("/health").status_code == 200
    # login com credenciais erradas responde 401 de negócio, não de gate
    resp = _login(client, "ninguem@clinica.com", "x")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Email ou senha incorretos"


def test_login_e_me(client, admin):
    resp = _login(client)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["usuario"]["email"] == "admin@clinica.com"
    assert body["usuario"]["cargo"] == "admin"
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.get_json()["id"] == admin


def test_senha_errada_e_bloqueio(app, client, admin):
    app.config["MAX_FAILED_LOGINS"] = 3
    for _ in range(3):
        assert _login(client, senha="errada").status_code == 401
    resp = _login(client)
    assert resp.status_code == 401
    assert "bloqueado" in resp.get_json()["message"]


def test_usuario_inativo(app, client, admin):
    with app.app_context():
        db.session.get(Usuario, admin).ativo = False
        db.session.commit()
    resp = _login(client)
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Usuário inativo"


def test_bootstrap_admin_uma_vez(client):
    resp = client.post("/usuarios/criar-admin", json={"email": "Dono@Clinica.com", "senha": "123456"})
    assert resp.status_code == 201
    assert resp.get_json()["email"] == "dono@clinica.com"
    assert resp.get_json()["cargo"] == "admin"
    again = client.post("/usuarios/criar-admin", json={"email": "x@clinica.com", "senha": "123456"})
    assert again.status_code == 409
    assert _login(client, "dono@clinica.com", "123456").status_code == 200


def test_bootstrap_desabilitado(app, client):
    app.config["ALLOW_ADMIN_BOOTSTRAP"] = False
    resp = client.post("/usuarios/criar-admin", json={"email": "a@clinica.com", "senha": "123456"})
    assert resp.status_code == 409


def test_bootstrap_senha_curta(client):
    resp = client.post("/usuarios/criar-admin", json={"email": "a@clinica.com", "senha": "123"})
    assert resp.status_code == 400
    assert "senha" in resp.get_json()["errors"]


def test_crud_usuarios(client, auth_headers):
    resp = client.post(
        "/usuarios/",
        json={"nome": "Recepção", "email": "recepcao@clinica.com", "senha": "abcdef", "cargo": "recepcao"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    uid = resp.get_json()["id"]
    assert "senha" not in resp.get_json()
    assert "password_hash" not in resp.get_json()

    dup = client.post(
        "/usuarios/",
        json={"nome": "Outro", "email": "RECEPCAO@clinica.com", "senha": "abcdef"},
        headers=auth_headers,
    )
    assert dup.status_code == 409

    resp = client.put(f"/usuarios/{uid}", json={"nome": "Recepção Centro"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["nome"] == "Recepção Centro"

    lista = client.get("/usuarios/", headers=auth_headers).get_json()
    assert {u["email"] for u in lista} == {"admin@clinica.com", "recepcao@clinica.com"}

    assert client.delete(f"/usuarios/{uid}", headers=auth_headers).status_code == 204


def test_nao_admin_recebe_403(client, auth_headers):
    client.post(
        "/usuarios/",
        json={"nome": "Dentista", "email": "dent@clinica.com", "senha": "abcdef", "cargo": "dentista"},
        headers=auth_headers,
    )
    token = _login(client, "dent@clinica.com", "abcdef").get_json()["token"]
    headers = {"Authorization": f"Bearer {token}"}
    assert client.get("/usuarios/", headers=headers).status_code == 403
    # demais recursos seguem acessíveis a qualquer conta autenticada
    assert client.get("/pacientes/", headers=headers).status_code == 200


def test_nao_exclui_a_si_mesmo(client, auth_headers, admin):
    assert client.delete(f"/usuarios/{admin}", headers=auth_headers).status_code == 409


def test_gate_desligado(app, client):
    app.config["REQUIRE_LOGIN"] = False
    assert client.get("/pacientes/").status_code == 200
