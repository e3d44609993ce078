import io
import os

from conftest import PROFISSIONAL


def test_criar_profissional(novo_profissional):
    data = novo_profissional()
    assert data["status"] == "ativo"
    assert data["especialidade"] == "ORTODONTISTA"
    assert data["especialidade_nome"] == "Ortodontista"


def test_especialidade_invalida(client, auth_headers):
    resp = client.post(
        "/profissionais/", json={**PROFISSIONAL, "especialidade": "ASTRONAUTA"}, headers=auth_headers
    )
    assert resp.status_code == 400
    assert "especialidade" in resp.get_json()["errors"]


def test_unicidade_conjunta(client, auth_headers, novo_profissional):
    novo_profissional()
    for campo, valor in (("cro", "SP-12345"), ("cpf", "987.654.321-00"), ("email", "JOAO@clinica.com")):
        payload = {
            **PROFISSIONAL,
            "cro": "RJ-1",
            "cpf": "555.555.555-55",
            "email": "outro@clinica.com",
            campo: valor,
        }
        resp = client.post("/profissionais/", json=payload, headers=auth_headers)
        assert resp.status_code == 409, campo
        assert resp.get_json()["message"] == "Já existe um profissional com este CRO, CPF ou e-mail"


def test_atualizacao_rechecagem_apenas_campos_presentes(client, auth_headers, novo_profissional):
    p = novo_profissional()
    resp = client.put(f"/profissionais/{p['id']}", json={"telefone": "(11) 5555-0000"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["cro"] == "SP-12345"

    outro = novo_profissional(cro="RJ-2", cpf="444.444.444-44", email="b@clinica.com")
    resp = client.put(f"/profissionais/{outro['id']}", json={"cro": "SP-12345"}, headers=auth_headers)
    assert resp.status_code == 409


def test_lista_compacta(client, auth_headers, novo_profissional):
    novo_profissional()
    resp = client.get("/profissionais/lista", headers=auth_headers)
    assert resp.status_code == 200
    itens = resp.get_json()
    assert itens == [
        {
            "id": itens[0]["id"],
            "nome": "Dr. João Souza",
            "status": "ativo",
            "especialidade": "ORTODONTISTA",
        }
    ]


def test_filtros(client, auth_headers, novo_profissional):
    novo_profissional()
    novo_profissional(
        nome="Dra. Ana Lima",
        cro="RJ-3",
        cpf="333.333.333-33",
        email="ana@clinica.com",
        especialidade="ENDODONTISTA",
    )
    data = client.get("/profissionais/?especialidade=ENDODONTISTA", headers=auth_headers).get_json()
    assert [p["nome"] for p in data["items"]] == ["Dra. Ana Lima"]
    data = client.get("/profissionais/?busca=SP-123", headers=auth_headers).get_json()
    assert data["total"] == 1


def test_status(client, auth_headers, novo_profissional):
    p = novo_profissional()
    resp = client.patch(f"/profissionais/{p['id']}/status", json={"status": "inativo"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "inativo"


def test_excluir_com_agendamentos_409(client, auth_headers, novo_profissional, novo_paciente):
    prof = novo_profissional()
    pac = novo_paciente()
    client.post(
        "/agendamentos/",
        json={
            "paciente_id": pac["id"],
            "profissional_id": prof["id"],
            "data": "2030-03-01",
            "hora_inicio": "10:00",
            "hora_fim": "11:00",
            "procedimento": "Canal",
        },
        headers=auth_headers,
    )
    assert client.delete(f"/profissionais/{prof['id']}", headers=auth_headers).status_code == 409


def test_avatar_substitui_e_remove(app, client, auth_headers, novo_profissional):
    p = novo_profissional()
    url = "/profissionais/{}/avatar".format(p["id"])
    primeiro = client.patch(
        url,
        data={"avatar": (io.BytesIO(b"jpeg-1"), "a.jpg")},
        content_type="multipart/form-data",
        headers=auth_headers,
    ).get_json()["avatar_url"]
    segundo = client.patch(
        url,
        data={"avatar": (io.BytesIO(b"jpeg-2"), "b.jpeg")},
        content_type="multipart/form-data",
        headers=auth_headers,
    ).get_json()["avatar_url"]
    pasta = app.config["UPLOAD_FOLDER"]
    assert not os.path.exists(os.path.join(pasta, primeiro.rsplit("/", 1)[1]))
    assert os.path.exists(os.path.join(pasta, segundo.rsplit("/", 1)[1]))

    assert client.delete(url, headers=auth_headers).status_code == 204
    assert not os.path.exists(os.path.join(pasta, segundo.rsplit("/", 1)[1]))
    assert client.get(f"/profissionais/{p['id']}", headers=auth_headers).get_json()["avatar_url"] is None


def test_avatar_remocao_falha_nao_quebra(client, auth_headers, novo_profissional, monkeypatch):
    p = novo_profissional()
    url = "/profissionais/{}/avatar".format(p["id"])
    client.patch(
        url,
        data={"avatar": (io.BytesIO(b"1"), "a.png")},
        content_type="multipart/form-data",
        headers=auth_headers,
    )

    def _falha(path):
        raise PermissionError("arquivo em uso")

    monkeypatch.setattr("odonto.uploads.os.remove", _falha)
    resp = client.patch(
        url,
        data={"avatar": (io.BytesIO(b"2"), "b.png")},
        content_type="multipart/form-data",
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.get_json()["avatar_url"].endswith("b.png")


def test_excluir_sem_agendamentos_204(client, auth_headers, novo_profissional):
    prof = novo_profissional()
    assert client.delete(f"/profissionais/{prof['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/profissionais/{prof['id']}", headers=auth_headers).status_code == 404
