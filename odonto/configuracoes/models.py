"""Configuração da clínica (linha única, id fixo 1).

As colunas são planas; a API expõe o formato aninhado
``clinica{endereco{}}``, ``notificacoes{}``, ``financeiro{}``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .. import db
from ..datas import iso

CONFIG_ID = 1

ENDERECO = ("cep", "logradouro", "numero", "complemento", "bairro", "cidade", "estado")
NOTIFICACOES = ("email_agendamento", "email_lembrete", "whatsapp_lembrete")


class Configuracao(db.Model):
    __tablename__ = "configuracoes"
    id = db.Column(db.Integer, primary_key=True)
    clinica_nome = db.Column(db.String(120), nullable=False, default="")
    clinica_cnpj = db.Column(db.String(20), nullable=False, default="")
    clinica_telefone = db.Column(db.String(20), nullable=False, default="")
    clinica_email = db.Column(db.String(120), nullable=False, default="")
    endereco_cep = db.Column(db.String(10), nullable=False, default="")
    endereco_logradouro = db.Column(db.String(200), nullable=False, default="")
    endereco_numero = db.Column(db.String(20), nullable=False, default="")
    endereco_complemento = db.Column(db.String(100))
    endereco_bairro = db.Column(db.String(100), nullable=False, default="")
    endereco_cidade = db.Column(db.String(100), nullable=False, default="")
    endereco_estado = db.Column(db.String(2), nullable=False, default="")
    email_agendamento = db.Column(db.Boolean, nullable=False, default=True)
    email_lembrete = db.Column(db.Boolean, nullable=False, default=True)
    whatsapp_lembrete = db.Column(db.Boolean, nullable=False, default=False)
    dias_vencimento = db.Column(db.Integer, nullable=False, default=30)
    lembrete_antecedencia = db.Column(db.Integer, nullable=False, default=3)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def padrao(cls) -> "Configuracao":
        """Instância transitória com os valores padrão (não adicionada à sessão)."""
        cfg = cls(id=CONFIG_ID)
        for coluna in cls.__table__.columns:
            default = coluna.default
            if default is not None and default.is_scalar:
                setattr(cfg, coluna.key, default.arg)
        return cfg

    @classmethod
    def atual(cls) -> "Configuracao":
        return db.session.get(cls, CONFIG_ID) or cls.padrao()

    def aplicar(self, dados: dict[str, Any]) -> "Configuracao":
        clinica = dados["clinica"]
        for campo in ("nome", "cnpj", "telefone", "email"):
            setattr(self, f"clinica_{campo}", clinica.get(campo))
        endereco = clinica["endereco"]
        for campo in ENDERECO:
            setattr(self, f"endereco_{campo}", endereco.get(campo))
        for campo in NOTIFICACOES:
            setattr(self, campo, bool(dados["notificacoes"].get(campo)))
        self.dias_vencimento = dados["financeiro"]["dias_vencimento"]
        self.lembrete_antecedencia = dados["financeiro"]["lembrete_antecedencia"]
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "clinica": {
                "nome": self.clinica_nome,
                "cnpj": self.clinica_cnpj,
                "telefone": self.clinica_telefone,
                "email": self.clinica_email,
                "endereco": {c: getattr(self, f"endereco_{c}") for c in ENDERECO},
            },
            "notificacoes": {c: getattr(self, c) for c in NOTIFICACOES},
            "financeiro": {
                "dias_vencimento": self.dias_vencimento,
                "lembrete_antecedencia": self.lembrete_antecedencia,
            },
            "updated_at": iso(self.updated_at),
        }
