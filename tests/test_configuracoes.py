import copy

from odonto.configuracoes.models import Configuracao

CONFIG = {
    "clinica": {
        "nome": "Clínica Sorriso",
        "cnpj": "12.345.678/0001-90",
        "telefone": "(11) 3000-0000",
        "email": "contato@sorriso.com.br",
        "endereco": {
            "cep": "01000-000",
            "logradouro": "Rua das Flores",
            "numero": "100",
            "bairro": "Centro",
            "cidade": "São Paulo",
            "estado": "SP",
        },
    },
    "notificacoes": {"email_agendamento": True, "email_lembrete": False, "whatsapp_lembrete": True},
    "financeiro": {"dias_vencimento": 30, "lembrete_antecedencia": 5},
}


def test_get_sem_registro_retorna_padroes_sem_gravar(app, client, auth_headers):
    resp = client.get("/configuracoes/", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["id"] == 1
    assert data["financeiro"] == {"dias_vencimento": 30, "lembrete_antecedencia": 3}
    assert data["notificacoes"]["email_agendamento"] is True
    with app.app_context():
        assert Configuracao.query.count() == 0


def test_put_faz_upsert_da_linha_unica(app, client, auth_headers):
    resp = client.put("/configuracoes/", json=CONFIG, headers=auth_headers)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["clinica"]["endereco"]["cidade"] == "São Paulo"
    assert data["clinica"]["endereco"]["complemento"] is None
    assert data["notificacoes"] == CONFIG["notificacoes"]

    segundo = copy.deepcopy(CONFIG)
    segundo["clinica"]["nome"] = "Clínica Sorriso Feliz"
    segundo["financeiro"]["dias_vencimento"] = 60
    resp = client.put("/configuracoes/", json=segundo, headers=auth_headers)
    assert resp.status_code == 200

    atual = client.get("/configuracoes/", headers=auth_headers).get_json()
    assert atual["clinica"]["nome"] == "Clínica Sorriso Feliz"
    assert atual["financeiro"]["dias_vencimento"] == 60
    with app.app_context():
        assert Configuracao.query.count() == 1


def test_faixas_do_financeiro(client, auth_headers):
    payload = copy.deepcopy(CONFIG)
    payload["financeiro"]["dias_vencimento"] = 91
    resp = client.put("/configuracoes/", json=payload, headers=auth_headers)
    assert resp.status_code == 400
    assert "financeiro" in resp.get_json()["errors"]

    payload["financeiro"] = {"dias_vencimento": 10, "lembrete_antecedencia": 0}
    assert client.put("/configuracoes/", json=payload, headers=auth_headers).status_code == 400


def test_estrutura_aninhada_obrigatoria(client, auth_headers):
    payload = copy.deepcopy(CONFIG)
    payload["clinica"]["endereco"]["estado"] = "SAO"
    payload["clinica"]["email"] = "invalido"
    resp = client.put("/configuracoes/", json=payload, headers=auth_headers)
    assert resp.status_code == 400
    erros = resp.get_json()["errors"]["clinica"]
    assert "email" in erros
    assert "estado" in erros["endereco"]
