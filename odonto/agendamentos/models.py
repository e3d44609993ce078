"""Modelo de agendamentos.

``hora_inicio``/``hora_fim`` guardam o horário já posicionado em ``data``
(DateTime ingênuo); a checagem de conflito compara esses valores
diretamente no SQL.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint

from .. import db
from ..datas import iso

STATUS = ("agendado", "confirmado", "em_andamento", "concluido", "cancelado")
# Status que ocupam a agenda do profissional
STATUS_ATIVOS = tuple(s for s in STATUS if s != "cancelado")


class Agendamento(db.Model):
    __tablename__ = "agendamentos"
    id = db.Column(db.Integer, primary_key=True)
    paciente_id = db.Column(db.Integer, db.ForeignKey("pacientes.id"), nullable=False, index=True)
    profissional_id = db.Column(
        db.Integer, db.ForeignKey("profissionais.id"), nullable=False, index=True
    )
    data = db.Column(db.Date, nullable=False)
    hora_inicio = db.Column(db.DateTime, nullable=False)
    hora_fim = db.Column(db.DateTime, nullable=False)
    procedimento = db.Column(db.String(200), nullable=False)
    observacoes = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default="agendado")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    paciente = db.relationship("Paciente", lazy="joined")
    profissional = db.relationship("Profissional", lazy="joined")

    __table_args__ = (
        CheckConstraint(
            "status in ('agendado','confirmado','em_andamento','concluido','cancelado')",
            name="ck_agendamentos_status",
        ),
        db.Index("ix_agendamentos_prof_data", "profissional_id", "data"),
    )

    def to_dict(self) -> dict[str, Any]:
        paciente = self.paciente
        profissional = self.profissional
        return {
            "id": self.id,
            "paciente_id": self.paciente_id,
            "profissional_id": self.profissional_id,
            "data": iso(self.data),
            "hora_inicio": iso(self.hora_inicio),
            "hora_fim": iso(self.hora_fim),
            "procedimento": self.procedimento,
            "observacoes": self.observacoes,
            "status": self.status,
            "paciente": (
                {
                    "id": paciente.id,
                    "nome": paciente.nome,
                    "telefone_celular": paciente.telefone_celular,
                }
                if paciente
                else None
            ),
            "profissional": (
                {"id": profissional.id, "nome": profissional.nome} if profissional else None
            ),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
