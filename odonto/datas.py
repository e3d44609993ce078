"""Utilidades de data/hora para entradas da API.

O frontend envia datas em formatos variados (``2024-03-01``,
``01/03/2024``, ISO com ``Z``); tudo é normalizado para ``date`` ou
``datetime`` ingênuo (sem fuso), preservando o horário de parede.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any


def _try_parse(fmt: str, s: str):  # pragma: no cover - função simples
    try:
        return datetime.strptime(s, fmt)
    except ValueError:
        return None


def parse_input_datetime(raw: Any) -> tuple[datetime | None, bool | None]:
    """Retorna (datetime, is_date_only) ou (None, None) se não reconhecido."""
    if not raw:
        return None, None
    s = str(raw).strip()
    for fmt in ("%d/%m/%Y %H:%M:%S", "%d/%m/%Y %H:%M"):
        dt = _try_parse(fmt, s)
        if dt:
            return dt, False
    dt = _try_parse("%d/%m/%Y", s)
    if dt:
        return dt, True
    for fmt in (
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%dT%H:%M",
        "%Y-%m-%d %H:%M",
    ):
        dt = _try_parse(fmt, s)
        if dt:
            return dt, False
    dt = _try_parse("%Y-%m-%d", s)
    if dt:
        return dt, True
    # ISO 8601 com timezone ("Z" ou offset "+HH:MM")
    iso = s[:-1] + "+00:00" if s.endswith("Z") else s
    try:
        dt = datetime.fromisoformat(iso)
        return dt.replace(tzinfo=None), False
    except ValueError:
        pass
    try:  # fallback flexível
        from dateutil.parser import ParserError, parse as du_parse

        dt = du_parse(s, dayfirst=True)
    except (ParserError, ValueError, OverflowError):
        return None, None
    is_date_only = len(s) == 10 and s.count("/") + s.count("-") == 2
    return dt.replace(tzinfo=None), is_date_only


def parse_time_of_day(raw: Any) -> time | None:
    """Aceita ``HH:MM``/``HH:MM:SS`` ou datetime completo (usa a hora)."""
    if not raw:
        return None
    s = str(raw).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        dt = _try_parse(fmt, s)
        if dt:
            return dt.time()
    dt, is_date_only = parse_input_datetime(s)
    if dt is None or is_date_only:
        return None
    return dt.time()


def on_date(dia: date, hora: time) -> datetime:
    return datetime.combine(dia, hora.replace(microsecond=0))


def iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
