from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint

from .. import db
from ..datas import iso

TIPOS = ("receita", "despesa")
STATUS = ("pendente", "pago", "cancelado")


class LancamentoFinanceiro(db.Model):
    __tablename__ = "lancamentos_financeiros"
    id = db.Column(db.Integer, primary_key=True)
    tipo = db.Column(db.String(10), nullable=False)
    categoria = db.Column(db.String(100), nullable=False)
    descricao = db.Column(db.String(255), nullable=False)
    valor = db.Column(db.Numeric(12, 2), nullable=False)
    data = db.Column(db.Date, nullable=False, index=True)
    status = db.Column(db.String(10), nullable=False, default="pendente")
    forma_pagamento = db.Column(db.String(50), nullable=False)
    # Lançamento sobrevive à exclusão do paciente
    paciente_id = db.Column(
        db.Integer, db.ForeignKey("pacientes.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    paciente = db.relationship("Paciente")

    __table_args__ = (
        CheckConstraint("tipo in ('receita','despesa')", name="ck_lancamentos_tipo"),
        CheckConstraint("status in ('pendente','pago','cancelado')", name="ck_lancamentos_status"),
        CheckConstraint("valor > 0", name="ck_lancamentos_valor_positivo"),
    )

    def to_dict(self) -> dict[str, Any]:
        paciente = self.paciente
        return {
            "id": self.id,
            "tipo": self.tipo,
            "categoria": self.categoria,
            "descricao": self.descricao,
            "valor": float(self.valor) if self.valor is not None else None,
            "data": iso(self.data),
            "status": self.status,
            "forma_pagamento": self.forma_pagamento,
            "paciente_id": self.paciente_id,
            "paciente": (
                {"id": paciente.id, "nome": paciente.nome, "cpf": paciente.cpf}
                if paciente
                else None
            ),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
