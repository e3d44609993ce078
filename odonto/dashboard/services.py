"""Agregações do painel inicial.

Somas usam ``COALESCE(SUM(valor), 0)`` no banco; lançamentos cancelados
ficam fora de somas e contagens.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Any

from sqlalchemy import func

from .. import db
from ..agendamentos.services import proximos_agendamentos
from ..financeiro.models import LancamentoFinanceiro
from ..pacientes.models import Paciente


def _agregado(tipo: str, inicio: date, fim: date) -> dict[str, Any]:
    total, quantidade = (
        db.session.query(
            func.coalesce(func.sum(LancamentoFinanceiro.valor), 0),
            func.count(LancamentoFinanceiro.id),
        )
        .filter(
            LancamentoFinanceiro.tipo == tipo,
            LancamentoFinanceiro.status != "cancelado",
            LancamentoFinanceiro.data >= inicio,
            LancamentoFinanceiro.data <= fim,
        )
        .one()
    )
    return {"total": round(float(total or 0), 2), "quantidade": int(quantidade or 0)}


def limites_do_mes(hoje: date) -> tuple[date, date]:
    ultimo = calendar.monthrange(hoje.year, hoje.month)[1]
    return hoje.replace(day=1), hoje.replace(day=ultimo)


def get_summary(hoje: date) -> dict[str, Any]:
    inicio_mes, fim_mes = limites_do_mes(hoje)
    receitas_dia = _agregado("receita", hoje, hoje)
    receitas_mes = _agregado("receita", inicio_mes, fim_mes)
    despesas_mes = _agregado("despesa", inicio_mes, fim_mes)
    pendentes = LancamentoFinanceiro.query.filter(LancamentoFinanceiro.status == "pendente").count()
    proximos = proximos_agendamentos(hoje, limite=5, excluir=("cancelado", "concluido"))
    return {
        "financeiro": {
            "receitas_dia": receitas_dia,
            "receitas_mes": receitas_mes,
            "despesas_mes": despesas_mes,
            "saldo_mes": round(receitas_mes["total"] - despesas_mes["total"], 2),
            "lancamentos_pendentes": pendentes,
        },
        "proximos_agendamentos": [a.to_dict() for a in proximos],
        "total_pacientes": Paciente.query.filter(Paciente.status == "ativo").count(),
    }
