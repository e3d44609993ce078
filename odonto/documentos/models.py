from datetime import datetime

from .. import db
from ..datas import iso


class Documento(db.Model):
    """Arquivo anexado ao paciente (exames, termos, radiografias)."""

    __tablename__ = "documentos"
    id = db.Column(db.Integer, primary_key=True)
    paciente_id = db.Column(db.Integer, db.ForeignKey("pacientes.id"), nullable=False, index=True)
    nome = db.Column(db.String(200), nullable=False)
    tipo = db.Column(db.String(50), nullable=False)
    url = db.Column(db.String(300), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):  # pragma: no cover
        return f"<Documento {self.id} - {self.tipo}>"

    def to_dict(self):
        return {
            "id": self.id,
            "paciente_id": self.paciente_id,
            "nome": self.nome,
            "tipo": self.tipo,
            "url": self.url,
            "created_at": iso(self.created_at),
        }
