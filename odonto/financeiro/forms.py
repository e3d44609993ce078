from wtforms import DecimalField, IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, Optional

from ..api_forms import ApiForm, DataField, Positivo
from .models import STATUS, TIPOS


class LancamentoForm(ApiForm):
    tipo = SelectField("Tipo", choices=[(t, t) for t in TIPOS])
    categoria = StringField("Categoria", validators=[DataRequired(), Length(max=100)])
    descricao = StringField("Descrição", validators=[DataRequired(), Length(max=255)])
    valor = DecimalField("Valor", places=2, validators=[InputRequired(), Positivo()])
    data = DataField("Data", validators=[DataRequired()])
    status = SelectField("Status", choices=[(s, s) for s in STATUS])
    forma_pagamento = StringField("Forma de pagamento", validators=[DataRequired(), Length(max=50)])
    paciente_id = IntegerField("Paciente", validators=[Optional()])
