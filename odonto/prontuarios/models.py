from __future__ import annotations

from datetime import datetime
from typing import Any

from .. import db
from ..datas import iso


class Prontuario(db.Model):
    __tablename__ = "prontuarios"
    id = db.Column(db.Integer, primary_key=True)
    paciente_id = db.Column(db.Integer, db.ForeignKey("pacientes.id"), nullable=False, index=True)
    data = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    descricao = db.Column(db.Text, nullable=False)
    procedimento = db.Column(db.String(200), nullable=False)
    observacoes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    paciente = db.relationship("Paciente")

    def to_dict(self, incluir_paciente: bool = False) -> dict[str, Any]:
        data = {
            "id": self.id,
            "paciente_id": self.paciente_id,
            "data": iso(self.data),
            "descricao": self.descricao,
            "procedimento": self.procedimento,
            "observacoes": self.observacoes,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if incluir_paciente and self.paciente is not None:
            data["paciente"] = self.paciente.resumo()
        return data


class Odontograma(db.Model):
    """Ficha odontológica de um prontuário (1:1, criada no primeiro procedimento)."""

    __tablename__ = "odontogramas"
    id = db.Column(db.Integer, primary_key=True)
    prontuario_id = db.Column(
        db.Integer,
        db.ForeignKey("prontuarios.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    procedimentos = db.relationship(
        "ProcedimentoOdontograma",
        backref="odontograma",
        cascade="all, delete-orphan",
        order_by="ProcedimentoOdontograma.data",
    )


class ProcedimentoOdontograma(db.Model):
    __tablename__ = "procedimentos_odontograma"
    id = db.Column(db.Integer, primary_key=True)
    odontograma_id = db.Column(
        db.Integer,
        db.ForeignKey("odontogramas.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    dente = db.Column(db.Integer, nullable=False)
    face = db.Column(db.String(1), nullable=False)
    procedimento = db.Column(db.String(200), nullable=False)
    observacao = db.Column(db.Text)
    data = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "odontograma_id": self.odontograma_id,
            "dente": self.dente,
            "face": self.face,
            "procedimento": self.procedimento,
            "observacao": self.observacao,
            "data": iso(self.data),
        }
