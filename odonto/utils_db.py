import logging
import math
import threading
import time
import zlib
from contextlib import contextmanager
from datetime import date
from functools import wraps
from typing import Any, Callable, Iterator, TypeVar

from flask import current_app, request
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from . import db
from .datas import parse_input_datetime
from .errors import (
    ConflictError,
    DatabaseBusyError,
    NotFoundError,
    ValidationError,
    is_sqlite_busy,
)

logger = logging.getLogger("db.retry")

T = TypeVar("T")


def get_or_404(model, ident, message: str = "Registro não encontrado"):
    """Session.get que levanta NotFoundError (404 JSON) quando ausente."""
    obj = db.session.get(model, ident)
    if obj is None:
        raise NotFoundError(message)
    return obj


def retry_on_busy(fn: Callable[..., T]) -> Callable[..., T]:
    """Re-executa a unidade de trabalho inteira quando o commit esbarra em bloqueio.

    A função decorada precisa montar e commitar suas alterações do zero, pois
    o rollback que acompanha ``DatabaseBusyError`` descarta o que estava
    pendente na sessão. Tentativas extras e backoff vêm de
    ``SQLITE_BUSY_RETRIES`` e ``SQLITE_BUSY_BACKOFF`` (dobrado a cada vez).
    """

    @wraps(fn)
    def wrapper(*args, **kwargs) -> T:
        retries = int(current_app.config.get("SQLITE_BUSY_RETRIES", 2))
        backoff = float(current_app.config.get("SQLITE_BUSY_BACKOFF", 0.1))
        attempt = 0
        while True:
            try:
                return fn(*args, **kwargs)
            except (DatabaseBusyError, OperationalError) as exc:
                if not isinstance(exc, DatabaseBusyError):
                    # flush fora do commit (autoflush, savepoint) deixa a sessão pendente
                    if not is_sqlite_busy(exc):
                        raise
                    db.session.rollback()
                if attempt >= retries:
                    logger.error("%s: banco ocupado após %s tentativas", fn.__name__, attempt + 1)
                    if isinstance(exc, DatabaseBusyError):
                        raise
                    raise DatabaseBusyError() from exc
                time.sleep(backoff * (2**attempt))
                attempt += 1
                logger.info("%s: banco ocupado, tentativa %s/%s", fn.__name__, attempt, retries)

    return wrapper


@contextmanager
def transactional() -> Iterator[None]:
    """Bloco de escrita: commit ao sair, rollback se algo falhar.

        with transactional():
            db.session.add(paciente)
    """
    try:
        yield
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def commit_or_conflict(message: str) -> None:
    """Commit convertendo violação de unique constraint em ConflictError.

    Cobre a janela entre a checagem de unicidade na aplicação e o INSERT
    (duas requisições simultâneas com o mesmo CPF, por exemplo).
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.info("IntegrityError convertido em 409: %s", exc.orig)
        raise ConflictError(message) from exc


# ===================== Locks por chave =====================
_registry_guard = threading.Lock()
_key_locks: dict[tuple[Any, ...], threading.Lock] = {}


def _advisory_key(chave: tuple[Any, ...]) -> int:
    return zlib.crc32(repr(chave).encode("utf-8"))


@contextmanager
def key_lock(*chave: Any) -> Iterator[None]:
    """Serializa blocos check-then-write que compartilham a mesma chave.

    PostgreSQL: pg_advisory_xact_lock (liberado no commit/rollback).
    Demais bancos: lock em processo, suficiente para um worker com threads.
    """
    bind = db.session.get_bind()
    if bind.dialect.name == "postgresql":  # pragma: no cover - sem postgres nos testes
        db.session.execute(text("SELECT pg_advisory_xact_lock(:k)"), {"k": _advisory_key(chave)})
        yield
        return
    with _registry_guard:
        lock = _key_locks.setdefault(chave, threading.Lock())
    with lock:
        yield


# ===================== Paginação =====================
def page_args(limit_config: str = "DEFAULT_PAGE_LIMIT") -> tuple[int, int]:
    """Lê page/limit da query string aplicando defaults e teto da config."""
    default_limit = current_app.config.get(limit_config, 10)
    max_limit = current_app.config.get("MAX_PAGE_LIMIT", 1000)
    page = request.args.get("page", 1, type=int) or 1
    limit = request.args.get("limit", default_limit, type=int) or default_limit
    return max(page, 1), min(max(limit, 1), max_limit)


def date_arg(nome: str) -> date | None:
    """Data opcional da query string; formato inválido vira 400."""
    raw = request.args.get(nome)
    if not raw:
        return None
    dt, _ = parse_input_datetime(raw)
    if dt is None:
        raise ValidationError({nome: ["Data inválida"]})
    return dt.date()


def paginate(query, page: int, limit: int, serialize: Callable[[Any], dict]) -> dict[str, Any]:
    total = query.order_by(None).count()
    registros = query.offset((page - 1) * limit).limit(limit).all()
    return {
        "items": [serialize(r) for r in registros],
        "total": total,
        "pages": math.ceil(total / limit) if limit else 0,
    }
