"""Emissão e validação do token Bearer (JWT HS256 via PyJWT)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from flask import current_app

from ..errors import UnauthorizedError


def create_access_token(subject: int | str, extra: dict[str, Any] | None = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=int(current_app.config["JWT_EXPIRES_MINUTES"]))
    payload: dict[str, Any] = {
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def decode_token(token: str) -> dict[str, Any]:
    """Valida assinatura e expiração; levanta UnauthorizedError se inválido."""
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token expirado") from exc
    except jwt.PyJWTError as exc:
        raise UnauthorizedError("Token inválido") from exc


def subject_from_header(header: str | None) -> int:
    """Extrai o id da conta de ``Authorization: Bearer <token>``."""
    if not header:
        raise UnauthorizedError("Token não informado")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Token mal formatado")
    payload = decode_token(token.strip())
    try:
        return int(payload["sub"])
    except (TypeError, ValueError) as exc:
        raise UnauthorizedError("Token inválido") from exc
