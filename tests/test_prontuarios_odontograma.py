import pytest

from odonto import db
from odonto.prontuarios.models import Odontograma, ProcedimentoOdontograma, Prontuario


@pytest.fixture()
def prontuario(client, auth_headers, novo_paciente):
    paciente = novo_paciente()
    resp = client.post(
        "/prontuarios/",
        json={
            "paciente_id": paciente["id"],
            "descricao": "Dor no molar inferior",
            "procedimento": "Avaliação",
        },
        headers=auth_headers,
    )
    assert resp.status_code == 201
    return resp.get_json()


def _url(pr):
    return f"/pacientes/{pr['paciente_id']}/prontuario/{pr['id']}/odontograma"


def test_criar_prontuario_paciente_inexistente(client, auth_headers):
    resp = client.post(
        "/prontuarios/",
        json={"paciente_id": 999, "descricao": "x", "procedimento": "y"},
        headers=auth_headers,
    )
    assert resp.status_code == 404


def test_listagens_por_paciente(client, auth_headers, prontuario):
    pid = prontuario["paciente_id"]
    lista = client.get(f"/prontuarios/paciente/{pid}", headers=auth_headers).get_json()
    assert [p["id"] for p in lista] == [prontuario["id"]]
    pagina = client.get(f"/prontuarios/?paciente_id={pid}", headers=auth_headers).get_json()
    assert pagina["total"] == 1
    detalhe = client.get(f"/prontuarios/{prontuario['id']}", headers=auth_headers).get_json()
    assert detalhe["paciente"]["nome"] == "Maria da Silva"


def test_atualizacao_parcial(client, auth_headers, prontuario):
    resp = client.put(
        f"/prontuarios/{prontuario['id']}", json={"observacoes": "Retorno em 15 dias"}, headers=auth_headers
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["observacoes"] == "Retorno em 15 dias"
    assert data["descricao"] == "Dor no molar inferior"


def test_odontograma_vazio_antes_do_primeiro_procedimento(client, auth_headers, prontuario):
    resp = client.get(_url(prontuario), headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json() == {"procedimentos": [], "marcacoes": {}}


def test_criacao_preguicosa_e_reuso_da_ficha(app, client, auth_headers, prontuario):
    r1 = client.post(
        _url(prontuario),
        json={"dente": 36, "face": "O", "procedimento": "Restauração"},
        headers=auth_headers,
    )
    assert r1.status_code == 201
    r2 = client.post(
        _url(prontuario),
        json={"dente": 36, "face": "oclusal", "procedimento": "Selante", "observacao": "revisar"},
        headers=auth_headers,
    )
    assert r2.status_code == 201
    assert r2.get_json()["face"] == "O"
    assert r1.get_json()["odontograma_id"] == r2.get_json()["odontograma_id"]

    ficha = client.get(_url(prontuario), headers=auth_headers).get_json()
    assert len(ficha["procedimentos"]) == 2
    assert ficha["marcacoes"] == {"36": ["O"]}
    with app.app_context():
        assert Odontograma.query.filter_by(prontuario_id=prontuario["id"]).count() == 1


@pytest.mark.parametrize("dente", [10, 19, 50, 0])
def test_dente_fora_da_notacao_fdi(client, auth_headers, prontuario, dente):
    resp = client.post(
        _url(prontuario), json={"dente": dente, "face": "V", "procedimento": "X"}, headers=auth_headers
    )
    assert resp.status_code == 400
    assert "dente" in resp.get_json()["errors"]


def test_face_invalida(client, auth_headers, prontuario):
    resp = client.post(
        _url(prontuario), json={"dente": 11, "face": "Z", "procedimento": "X"}, headers=auth_headers
    )
    assert resp.status_code == 400
    assert "face" in resp.get_json()["errors"]


def test_prontuario_de_outro_paciente(client, auth_headers, prontuario, novo_paciente):
    outro = novo_paciente(nome="Carlos Alberto", cpf="999.888.777-66")
    url = f"/pacientes/{outro['id']}/prontuario/{prontuario['id']}/odontograma"
    resp = client.post(url, json={"dente": 11, "face": "V", "procedimento": "X"}, headers=auth_headers)
    assert resp.status_code == 404
    assert client.get(url, headers=auth_headers).get_json() == {"procedimentos": [], "marcacoes": {}}


def test_excluir_prontuario_remove_ficha_e_procedimentos(app, client, auth_headers, prontuario):
    client.post(
        _url(prontuario), json={"dente": 21, "face": "M", "procedimento": "Faceta"}, headers=auth_headers
    )
    resp = client.delete(f"/prontuarios/{prontuario['id']}", headers=auth_headers)
    assert resp.status_code == 204
    with app.app_context():
        assert db.session.get(Prontuario, prontuario["id"]) is None
        assert Odontograma.query.count() == 0
        assert ProcedimentoOdontograma.query.count() == 0
