"""Initial schema.

Cria todas as tabelas da API (usuários, pacientes, profissionais, agenda,
prontuários/odontograma, financeiro, documentos e configuração).

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa

from alembic import op as _op  # type: ignore[attr-defined]

op: Any = _op

# revision identifiers, used by Alembic.
revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def _endereco() -> list[sa.Column]:
    return [
        sa.Column("cep", sa.String(10)),
        sa.Column("logradouro", sa.String(200)),
        sa.Column("numero", sa.String(20)),
        sa.Column("complemento", sa.String(100)),
        sa.Column("bairro", sa.String(100)),
        sa.Column("cidade", sa.String(100)),
        sa.Column("estado", sa.String(2)),
    ]


def _timestamps() -> list[sa.Column]:
    return [sa.Column("created_at", sa.DateTime()), sa.Column("updated_at", sa.DateTime())]


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nome", sa.String(128), nullable=False),
        sa.Column("email", sa.String(120), nullable=False),
        sa.Column("password_hash", sa.String(256), nullable=False),
        sa.Column("cargo", sa.String(50), nullable=False),
        sa.Column("ativo", sa.Boolean(), nullable=False),
        sa.Column("criado_em", sa.DateTime()),
        sa.Column("failed_login_count", sa.Integer()),
        sa.Column("locked_until", sa.DateTime()),
        sa.Column("last_password_change", sa.DateTime()),
    )
    op.create_index("ix_usuarios_email", "usuarios", ["email"], unique=True)

    op.create_table(
        "pacientes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("cpf", sa.String(14), nullable=False, unique=True),
        sa.Column("data_nascimento", sa.Date()),
        sa.Column("genero", sa.String(20)),
        sa.Column("email", sa.String(120)),
        sa.Column("telefone_celular", sa.String(20), nullable=False),
        sa.Column("telefone_fixo", sa.String(20)),
        *_endereco(),
        sa.Column("contato_emergencia_nome", sa.String(100)),
        sa.Column("contato_emergencia_telefone", sa.String(20)),
        sa.Column("contato_emergencia_parentesco", sa.String(50)),
        sa.Column("historico_medico", sa.Text()),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("avatar_url", sa.String(300)),
        *_timestamps(),
        sa.CheckConstraint("status in ('ativo','inativo')", name="ck_pacientes_status"),
    )
    op.create_index("ix_pacientes_nome", "pacientes", ["nome"])

    op.create_table(
        "profissionais",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("nome", sa.String(120), nullable=False),
        sa.Column("email", sa.String(120), nullable=False, unique=True),
        sa.Column("telefone", sa.String(20), nullable=False),
        sa.Column("cro", sa.String(20), nullable=False, unique=True),
        sa.Column("especialidade", sa.String(30), nullable=False),
        sa.Column("data_nascimento", sa.Date()),
        sa.Column("cpf", sa.String(14), nullable=False, unique=True),
        sa.Column("rg", sa.String(20)),
        *_endereco(),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("avatar_url", sa.String(300)),
        *_timestamps(),
        sa.CheckConstraint("status in ('ativo','inativo')", name="ck_profissionais_status"),
    )
    op.create_index("ix_profissionais_nome", "profissionais", ["nome"])

    op.create_table(
        "agendamentos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("paciente_id", sa.Integer(), sa.ForeignKey("pacientes.id"), nullable=False),
        sa.Column(
            "profissional_id", sa.Integer(), sa.ForeignKey("profissionais.id"), nullable=False
        ),
        sa.Column("data", sa.Date(), nullable=False),
        sa.Column("hora_inicio", sa.DateTime(), nullable=False),
        sa.Column("hora_fim", sa.DateTime(), nullable=False),
        sa.Column("procedimento", sa.String(200), nullable=False),
        sa.Column("observacoes", sa.Text()),
        sa.Column("status", sa.String(20), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status in ('agendado','confirmado','em_andamento','concluido','cancelado')",
            name="ck_agendamentos_status",
        ),
    )
    op.create_index("ix_agendamentos_paciente_id", "agendamentos", ["paciente_id"])
    op.create_index("ix_agendamentos_profissional_id", "agendamentos", ["profissional_id"])
    op.create_index("ix_agendamentos_prof_data", "agendamentos", ["profissional_id", "data"])

    op.create_table(
        "prontuarios",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("paciente_id", sa.Integer(), sa.ForeignKey("pacientes.id"), nullable=False),
        sa.Column("data", sa.DateTime(), nullable=False),
        sa.Column("descricao", sa.Text(), nullable=False),
        sa.Column("procedimento", sa.String(200), nullable=False),
        sa.Column("observacoes", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_prontuarios_paciente_id", "prontuarios", ["paciente_id"])

    op.create_table(
        "odontogramas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "prontuario_id",
            sa.Integer(),
            sa.ForeignKey("prontuarios.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("created_at", sa.DateTime()),
    )

    op.create_table(
        "procedimentos_odontograma",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "odontograma_id",
            sa.Integer(),
            sa.ForeignKey("odontogramas.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("dente", sa.Integer(), nullable=False),
        sa.Column("face", sa.String(1), nullable=False),
        sa.Column("procedimento", sa.String(200), nullable=False),
        sa.Column("observacao", sa.Text()),
        sa.Column("data", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_procedimentos_odontograma_odontograma_id",
        "procedimentos_odontograma",
        ["odontograma_id"],
    )

    op.create_table(
        "lancamentos_financeiros",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tipo", sa.String(10), nullable=False),
        sa.Column("categoria", sa.String(100), nullable=False),
        sa.Column("descricao", sa.String(255), nullable=False),
        sa.Column("valor", sa.Numeric(12, 2), nullable=False),
        sa.Column("data", sa.Date(), nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("forma_pagamento", sa.String(50), nullable=False),
        sa.Column(
            "paciente_id",
            sa.Integer(),
            sa.ForeignKey("pacientes.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint("tipo in ('receita','despesa')", name="ck_lancamentos_tipo"),
        sa.CheckConstraint(
            "status in ('pendente','pago','cancelado')", name="ck_lancamentos_status"
        ),
        sa.CheckConstraint("valor > 0", name="ck_lancamentos_valor_positivo"),
    )
    op.create_index("ix_lancamentos_financeiros_data", "lancamentos_financeiros", ["data"])
    op.create_index(
        "ix_lancamentos_financeiros_paciente_id", "lancamentos_financeiros", ["paciente_id"]
    )

    op.create_table(
        "documentos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("paciente_id", sa.Integer(), sa.ForeignKey("pacientes.id"), nullable=False),
        sa.Column("nome", sa.String(200), nullable=False),
        sa.Column("tipo", sa.String(50), nullable=False),
        sa.Column("url", sa.String(300), nullable=False),
        sa.Column("created_at", sa.DateTime()),
    )
    op.create_index("ix_documentos_paciente_id", "documentos", ["paciente_id"])

    op.create_table(
        "configuracoes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("clinica_nome", sa.String(120), nullable=False),
        sa.Column("clinica_cnpj", sa.String(20), nullable=False),
        sa.Column("clinica_telefone", sa.String(20), nullable=False),
        sa.Column("clinica_email", sa.String(120), nullable=False),
        sa.Column("endereco_cep", sa.String(10), nullable=False),
        sa.Column("endereco_logradouro", sa.String(200), nullable=False),
        sa.Column("endereco_numero", sa.String(20), nullable=False),
        sa.Column("endereco_complemento", sa.String(100)),
        sa.Column("endereco_bairro", sa.String(100), nullable=False),
        sa.Column("endereco_cidade", sa.String(100), nullable=False),
        sa.Column("endereco_estado", sa.String(2), nullable=False),
        sa.Column("email_agendamento", sa.Boolean(), nullable=False),
        sa.Column("email_lembrete", sa.Boolean(), nullable=False),
        sa.Column("whatsapp_lembrete", sa.Boolean(), nullable=False),
        sa.Column("dias_vencimento", sa.Integer(), nullable=False),
        sa.Column("lembrete_antecedencia", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime()),
    )


def downgrade() -> None:
    for tabela in (
        "configuracoes",
        "documentos",
        "lancamentos_financeiros",
        "procedimentos_odontograma",
        "odontogramas",
        "prontuarios",
        "agendamentos",
        "profissionais",
        "pacientes",
        "usuarios",
    ):
        op.drop_table(tabela)
