from datetime import datetime, timedelta
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from .. import db
from ..datas import iso


class Usuario(db.Model):
    __tablename__ = "usuarios"
    id = db.Column(db.Integer, primary_key=True)
    nome = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(120), unique=True, index=True, nullable=False)
    # Apenas o hash com salt (werkzeug scrypt/pbkdf2) é persistido
    password_hash = db.Column(db.String(256), nullable=False)
    # Cargos: admin, dentista, recepcao, financeiro
    cargo = db.Column(db.String(50), nullable=False, default="admin")
    ativo = db.Column(db.Boolean, nullable=False, default=True)
    criado_em = db.Column(db.DateTime, default=datetime.utcnow)
    # Segurança adicional
    failed_login_count = db.Column(db.Integer, default=0)
    locked_until = db.Column(db.DateTime)
    last_password_change = db.Column(db.DateTime)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)
        self.last_password_change = datetime.utcnow()

    def check_password(self, password: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, password)

    # --- Controle de tentativas de login ---
    def register_failed_login(self, max_attempts: int, lock_minutes: int) -> None:
        self.failed_login_count = (self.failed_login_count or 0) + 1
        if self.failed_login_count >= max_attempts:
            self.locked_until = datetime.utcnow() + timedelta(minutes=lock_minutes)
            self.failed_login_count = 0  # reinicia após bloqueio

    def reset_failed_login(self) -> None:
        self.failed_login_count = 0
        self.locked_until = None

    def is_locked(self, now: datetime | None = None) -> bool:
        now = now or datetime.utcnow()
        return bool(self.locked_until and self.locked_until > now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "nome": self.nome,
            "email": self.email,
            "cargo": self.cargo,
            "ativo": bool(self.ativo),
            "criado_em": iso(self.criado_em),
        }
