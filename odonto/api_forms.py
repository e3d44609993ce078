"""Base de formulários WTForms para payloads JSON.

``ApiForm`` recebe o corpo JSON da requisição, achata objetos aninhados para
os nomes usados por ``FormField`` (``clinica-endereco-cep``) e valida com os
validators do WTForms. Em modo ``partial`` (PUT) só os campos presentes no
payload são validados e devolvidos por ``dados()``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from flask import current_app, request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import Field
from wtforms.validators import ValidationError as CampoInvalido

from .datas import parse_input_datetime, parse_time_of_day
from .errors import ValidationError


def _flatten(payload: dict[str, Any], prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for key, value in payload.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{name}-"))
        elif value is None:
            flat[name] = ""
        elif isinstance(value, bool):
            flat[name] = "true" if value else "false"
        else:
            flat[name] = str(value)
    return flat


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, dict):
        return {k: _clean(v) for k, v in value.items()}
    return value


class ApiForm(FlaskForm):
    class Meta:
        csrf = False

    def __init__(self, payload: Any = None, *, partial: bool = False, **kwargs) -> None:
        if payload is None:
            payload = request.get_json(silent=True)
            if payload is None:
                payload = {}
        if not isinstance(payload, dict):
            raise ValidationError({"payload": ["JSON deve ser um objeto"]})
        flat = _flatten(payload)
        self._keys = set(flat)
        self._partial = partial
        super().__init__(formdata=MultiDict(flat), **kwargs)
        if partial:
            for name in list(self._fields):
                if not self.presente(name):
                    del self[name]

    def presente(self, name: str) -> bool:
        return name in self._keys or any(k.startswith(f"{name}-") for k in self._keys)

    def validar(self) -> "ApiForm":
        if not self.validate():
            raise ValidationError(self.errors)
        return self

    def dados(self) -> dict[str, Any]:
        """Valores limpos dos campos presentes (strings vazias viram None)."""
        return {name: _clean(field.data) for name, field in self._fields.items()}


class UploadForm(FlaskForm):
    """Formulário multipart (arquivo + campos); CSRF desligado na API."""

    class Meta:
        csrf = False

    def validar(self) -> "UploadForm":
        if not self.validate():
            raise ValidationError(self.errors)
        return self


# ===================== Campos =====================
class DataField(Field):
    """Data em ``YYYY-MM-DD``, ``DD/MM/YYYY`` ou ISO datetime (usa a data)."""

    def _value(self):
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist):
        if not valuelist or not valuelist[0]:
            self.data = None
            return
        dt, _ = parse_input_datetime(valuelist[0])
        if dt is None:
            self.data = None
            raise ValueError("Data inválida")
        self.data = dt.date()


class DataHoraField(Field):
    """Data e hora em qualquer formato aceito por ``parse_input_datetime``."""

    def _value(self):
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist):
        if not valuelist or not valuelist[0]:
            self.data = None
            return
        self.data, _ = parse_input_datetime(valuelist[0])
        if self.data is None:
            raise ValueError("Data inválida")


class HoraField(Field):
    """Hora do dia (``HH:MM``) ou datetime ISO, do qual só a hora é usada."""

    def _value(self):
        return self.data.strftime("%H:%M") if self.data else ""

    def process_formdata(self, valuelist):
        if not valuelist or not valuelist[0]:
            self.data = None
            return
        self.data = parse_time_of_day(valuelist[0])
        if self.data is None:
            raise ValueError("Hora inválida")


# ===================== Validators =====================
def normalizar_cpf(raw: str | None, *, validar: bool = True) -> str | None:
    """Normaliza CPF para XXX.XXX.XXX-YY e opcionalmente valida os DVs.

    Aceita a máscara completa ou 11 dígitos. Retorna None se entrada vazia.
    Formato inválido sempre levanta ValueError; dígitos verificadores só
    quando ``validar=True``.
    """
    if not raw:
        return None
    s = str(raw).strip()
    digits = "".join(ch for ch in s if ch.isdigit())
    mascara = len(s) == 14 and s[3] == "." and s[7] == "." and s[11] == "-"
    if len(digits) != 11 or not (mascara or s.isdigit()):
        raise ValueError("CPF deve estar no formato 000.000.000-00")
    if validar:
        if digits == digits[0] * 11:
            raise ValueError("CPF inválido")
        soma1 = sum(int(digits[i]) * (10 - i) for i in range(9))
        dv1 = (soma1 * 10) % 11
        if dv1 == 10:
            dv1 = 0
        if dv1 != int(digits[9]):
            raise ValueError("CPF inválido")
        soma2 = sum(int(digits[i]) * (11 - i) for i in range(10))
        dv2 = (soma2 * 10) % 11
        if dv2 == 10:
            dv2 = 0
        if dv2 != int(digits[10]):
            raise ValueError("CPF inválido")
    return f"{digits[0:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:11]}"


class CPF:
    """Valida e normaliza o CPF do campo (substitui ``field.data``)."""

    def __call__(self, form, field):
        if not field.data:
            return
        validar = bool(current_app.config.get("VALIDATE_CPF_CHECK_DIGITS"))
        try:
            field.data = normalizar_cpf(field.data, validar=validar)
        except ValueError as exc:
            raise CampoInvalido(str(exc)) from exc


class Positivo:
    def __init__(self, message: str = "Valor deve ser maior que zero") -> None:
        self.message = message

    def __call__(self, form, field):
        if field.data is None:
            return
        if Decimal(field.data) <= 0:
            raise CampoInvalido(self.message)
