from datetime import date, datetime
from typing import Any

from sqlalchemy import CheckConstraint

from .. import db
from ..datas import iso


class Paciente(db.Model):
    __tablename__ = "pacientes"
    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(100), nullable=False, index=True)
    # Unicidade garantida também no banco (fecha a janela check-then-insert)
    cpf = db.Column(db.String(14), unique=True, nullable=False)
    data_nascimento = db.Column(db.Date)
    genero = db.Column(db.String(20))
    email = db.Column(db.String(120))
    telefone_celular = db.Column(db.String(20), nullable=False)
    telefone_fixo = db.Column(db.String(20))
    cep = db.Column(db.String(10))
    logradouro = db.Column(db.String(200))
    numero = db.Column(db.String(20))
    complemento = db.Column(db.String(100))
    bairro = db.Column(db.String(100))
    cidade = db.Column(db.String(100))
    estado = db.Column(db.String(2))
    contato_emergencia_nome = db.Column(db.String(100))
    contato_emergencia_telefone = db.Column(db.String(20))
    contato_emergencia_parentesco = db.Column(db.String(50))
    historico_medico = db.Column(db.Text)
    status = db.Column(db.String(10), nullable=False, default="ativo")
    avatar_url = db.Column(db.String(300))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("status in ('ativo','inativo')", name="ck_pacientes_status"),
    )

    def idade(self) -> int | None:
        if not self.data_nascimento:
            return None
        hoje = date.today()
        anos = hoje.year - self.data_nascimento.year
        if (hoje.month, hoje.day) < (
            self.data_nascimento.month,
            self.data_nascimento.day,
        ):
            anos -= 1
        return anos

    def resumo(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "nome": self.nome,
            "cpf": self.cpf,
            "telefone_celular": self.telefone_celular,
            "status": self.status,
            "avatar_url": self.avatar_url,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.resumo(),
            "data_nascimento": iso(self.data_nascimento),
            "idade": self.idade(),
            "genero": self.genero,
            "email": self.email,
            "telefone_fixo": self.telefone_fixo,
            "cep": self.cep,
            "logradouro": self.logradouro,
            "numero": self.numero,
            "complemento": self.complemento,
            "bairro": self.bairro,
            "cidade": self.cidade,
            "estado": self.estado,
            "contato_emergencia_nome": self.contato_emergencia_nome,
            "contato_emergencia_telefone": self.contato_emergencia_telefone,
            "contato_emergencia_parentesco": self.contato_emergencia_parentesco,
            "historico_medico": self.historico_medico,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
