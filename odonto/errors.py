"""Erros de domínio e tradução centralizada para respostas JSON.

Rotas e serviços levantam as exceções abaixo; os handlers registrados em
``register_error_handlers`` convertem tudo para ``{"message": ...}`` com o
status HTTP correspondente.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, current_app, jsonify
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

_SQLITE_BUSY_MARKERS = (
    "database is locked",
    "database is busy",
    "database table is locked",
    "sqlite_busy",
)


def is_sqlite_busy(error: BaseException) -> bool:
    """True para SQLITE_BUSY/SQLITE_LOCKED vindos do driver."""
    msg = str(error).lower()
    return any(marker in msg for marker in _SQLITE_BUSY_MARKERS)


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(AppError):
    status_code = 400

    def __init__(self, errors: dict[str, list[str]], message: str | None = None) -> None:
        self.errors = errors
        if message is None:
            campos = ", ".join(sorted(errors)) or "payload"
            message = f"Dados inválidos: {campos}"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class UnauthorizedError(AppError):
    status_code = 401


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class ServiceUnavailableError(AppError):
    status_code = 503


class DatabaseBusyError(ServiceUnavailableError):
    """Banco bloqueado por outra escrita além do ``busy_timeout``.

    A transação já foi desfeita quando esta exceção chega ao chamador.
    """

    def __init__(self, message: str = "Banco de dados ocupado, tente novamente") -> None:
        super().__init__(message)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def _app_error(exc: AppError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify({"message": exc.description or exc.name}), exc.code or 500

    @app.errorhandler(OperationalError)
    def _operational_error(exc: OperationalError):
        if not is_sqlite_busy(exc):
            return _unexpected(exc)
        current_app.logger.warning("SQLite ocupado fora de retry_on_busy: %s", exc)
        return jsonify(DatabaseBusyError().to_dict()), DatabaseBusyError.status_code

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        # Cliente recebe mensagem genérica; detalhe fica no log do servidor
        current_app.logger.exception("Erro inesperado: %s", exc)
        return jsonify({"message": "Erro interno do servidor"}), 500
