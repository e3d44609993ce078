import sqlite3
import threading
import time

import pytest
from conftest import PACIENTE

from odonto import db
from odonto.errors import ConflictError, DatabaseBusyError
from odonto.pacientes.models import Paciente
from odonto.utils_db import commit_or_conflict, key_lock, retry_on_busy, transactional


def _get_sqlite_path(uri: str) -> str:
    assert uri.startswith("sqlite:///"), "Only sqlite URIs are supported in this test"
    return uri.replace("sqlite:///", "")


def _paciente(nome: str, cpf: str) -> Paciente:
    return Paciente(nome=nome, cpf=cpf, telefone_celular="(11) 90000-0000")


def _hold_write_lock(path: str, seconds: float, tabela: str) -> threading.Thread:
    def hold():
        con = sqlite3.connect(path)
        cur = con.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")  # acquire write lock
            cur.execute(f"CREATE TABLE IF NOT EXISTS {tabela}(id INTEGER)")
            time.sleep(seconds)
            con.commit()
        finally:
            con.close()

    t = threading.Thread(target=hold)
    t.start()
    time.sleep(0.1)  # give lock thread a head start
    return t


def test_pragmas_applied(app):
    """PRAGMAs (WAL, foreign_keys, busy_timeout) ativos nas conexões SQLite."""
    with app.app_context():
        with db.engine.connect() as conn:
            journal_mode = conn.exec_driver_sql("PRAGMA journal_mode").scalar()
            foreign_keys = conn.exec_driver_sql("PRAGMA foreign_keys").scalar()
            busy_timeout = conn.exec_driver_sql("PRAGMA busy_timeout").scalar()
    assert str(journal_mode).lower() == "wal"
    assert int(foreign_keys or 0) == 1
    assert int(busy_timeout or 0) >= 1000


def test_busy_timeout_absorve_lock_curto(app):
    with app.app_context():
        path = _get_sqlite_path(app.config["SQLALCHEMY_DATABASE_URI"])
        t = _hold_write_lock(path, 0.6, "_lock_curto")
        p = _paciente("Lock Curto", "100.000.000-02")
        db.session.add(p)
        # lock liberado antes do busy_timeout: o próprio driver espera
        db.session.commit()
        assert db.session.get(Paciente, p.id).nome == "Lock Curto"
        t.join()


def test_lock_alem_do_timeout_levanta_erro_sem_perder_escrita(app):
    with app.app_context():
        assert app.config["SQLITE_BUSY_TIMEOUT_MS"] == 1000
        path = _get_sqlite_path(app.config["SQLALCHEMY_DATABASE_URI"])
        t = _hold_write_lock(path, 1.6, "_lock_longo")
        db.session.add(_paciente("Bloqueado", "100.000.000-04"))
        with pytest.raises(DatabaseBusyError) as exc:
            db.session.commit()
        assert exc.value.status_code == 503
        t.join()
        # nada gravado em silêncio e a sessão segue utilizável
        assert Paciente.query.filter_by(cpf="100.000.000-04").count() == 0
        db.session.add(_paciente("Depois", "100.000.000-05"))
        db.session.commit()
        assert Paciente.query.filter_by(cpf="100.000.000-05").count() == 1


def test_retry_on_busy_reexecuta_unidade_inteira(app):
    app.config["SQLITE_BUSY_RETRIES"] = 3
    tentativas = []

    @retry_on_busy
    def cadastrar():
        tentativas.append(1)
        p = _paciente("Reexecutado", "100.000.000-06")
        db.session.add(p)
        db.session.commit()
        return p.id

    with app.app_context():
        path = _get_sqlite_path(app.config["SQLALCHEMY_DATABASE_URI"])
        t = _hold_write_lock(path, 1.5, "_lock_retry")
        pid = cadastrar()
        t.join()
        assert len(tentativas) >= 2
        assert pid is not None
        assert db.session.get(Paciente, pid).nome == "Reexecutado"
        assert Paciente.query.filter_by(cpf="100.000.000-06").count() == 1


def test_retry_on_busy_cobre_flush_explicito(app):
    app.config["SQLITE_BUSY_RETRIES"] = 3
    tentativas = []

    @retry_on_busy
    def cadastrar():
        tentativas.append(1)
        p = _paciente("Com Flush", "100.000.000-07")
        db.session.add(p)
        db.session.flush()
        db.session.commit()
        return p.id

    with app.app_context():
        path = _get_sqlite_path(app.config["SQLALCHEMY_DATABASE_URI"])
        t = _hold_write_lock(path, 1.5, "_lock_flush")
        pid = cadastrar()
        t.join()
        assert len(tentativas) >= 2
        assert db.session.get(Paciente, pid) is not None


def test_retry_on_busy_esgotado_levanta_503(app):
    app.config["SQLITE_BUSY_RETRIES"] = 0

    @retry_on_busy
    def cadastrar():
        db.session.add(_paciente("Sem Sorte", "100.000.000-08"))
        db.session.commit()

    with app.app_context():
        path = _get_sqlite_path(app.config["SQLALCHEMY_DATABASE_URI"])
        t = _hold_write_lock(path, 1.6, "_lock_esgotado")
        with pytest.raises(DatabaseBusyError):
            cadastrar()
        t.join()
        assert Paciente.query.filter_by(cpf="100.000.000-08").count() == 0


def test_api_responde_503_com_banco_bloqueado(app, client, auth_headers):
    app.config["SQLITE_BUSY_RETRIES"] = 0
    path = _get_sqlite_path(app.config["SQLALCHEMY_DATABASE_URI"])
    t = _hold_write_lock(path, 1.6, "_lock_api")
    resp = client.post("/pacientes/", json=PACIENTE, headers=auth_headers)
    t.join()
    assert resp.status_code == 503
    assert resp.get_json()["message"] == "Banco de dados ocupado, tente novamente"
    assert client.get("/pacientes/", headers=auth_headers).get_json()["total"] == 0


def test_transactional_context_manager(app):
    with app.app_context():
        name = f"Paciente {time.time()}"
        with transactional():
            db.session.add(_paciente(name, "100.000.000-03"))
        assert Paciente.query.filter_by(nome=name).first() is not None


def test_commit_or_conflict_converte_integrity_error(app):
    with app.app_context():
        db.session.add(_paciente("Primeiro", "200.000.000-00"))
        db.session.commit()
        db.session.add(_paciente("Segundo", "200.000.000-00"))
        with pytest.raises(ConflictError) as exc:
            commit_or_conflict("CPF já cadastrado")
        assert exc.value.status_code == 409
        # sessão utilizável após o rollback
        assert Paciente.query.count() == 1


def test_key_lock_serializa_mesma_chave(app):
    ordem = []

    def tarefa(nome):
        with app.app_context():
            with key_lock("agenda", 1, "2030-01-01"):
                ordem.append(f"{nome}:inicio")
                time.sleep(0.1)
                ordem.append(f"{nome}:fim")

    threads = [threading.Thread(target=tarefa, args=(n,)) for n in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    # nenhuma intercalação: cada bloco termina antes do próximo começar
    assert ordem[0].split(":")[0] == ordem[1].split(":")[0]
    assert ordem[2].split(":")[0] == ordem[3].split(":")[0]
