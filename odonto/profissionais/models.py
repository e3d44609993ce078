from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint

from .. import db
from ..datas import iso

# Chaves persistidas -> rótulo exibido
ESPECIALIDADES = {
    "CLINICO_GERAL": "Clínico Geral",
    "ORTODONTISTA": "Ortodontista",
    "ENDODONTISTA": "Endodontista",
    "PERIODONTISTA": "Periodontista",
    "IMPLANTODONTISTA": "Implantodontista",
    "ODONTOPEDIATRA": "Odontopediatra",
    "CIRURGIAO": "Cirurgião Bucomaxilofacial",
    "PROTESISTA": "Prótese Dentária",
    "DENTISTICA": "Dentística",
    "ESTETICA": "Estética Dental",
}


class Profissional(db.Model):
    __tablename__ = "profissionais"
    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(120), nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    telefone = db.Column(db.String(20), nullable=False)
    cro = db.Column(db.String(20), unique=True, nullable=False)
    especialidade = db.Column(db.String(30), nullable=False)
    data_nascimento = db.Column(db.Date)
    cpf = db.Column(db.String(14), unique=True, nullable=False)
    rg = db.Column(db.String(20))
    cep = db.Column(db.String(10))
    logradouro = db.Column(db.String(200))
    numero = db.Column(db.String(20))
    complemento = db.Column(db.String(100))
    bairro = db.Column(db.String(100))
    cidade = db.Column(db.String(100))
    estado = db.Column(db.String(2))
    status = db.Column(db.String(10), nullable=False, default="ativo")
    avatar_url = db.Column(db.String(300))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("status in ('ativo','inativo')", name="ck_profissionais_status"),
    )

    def resumo(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "nome": self.nome,
            "status": self.status,
            "especialidade": self.especialidade,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.resumo(),
            "especialidade_nome": ESPECIALIDADES.get(self.especialidade),
            "email": self.email,
            "telefone": self.telefone,
            "cro": self.cro,
            "data_nascimento": iso(self.data_nascimento),
            "cpf": self.cpf,
            "rg": self.rg,
            "cep": self.cep,
            "logradouro": self.logradouro,
            "numero": self.numero,
            "complemento": self.complemento,
            "bairro": self.bairro,
            "cidade": self.cidade,
            "estado": self.estado,
            "avatar_url": self.avatar_url,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
