from wtforms import IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional

from ..api_forms import ApiForm, DataField, HoraField
from .models import STATUS

STATUS_CHOICES = [(s, s) for s in STATUS]


class AgendamentoForm(ApiForm):
    paciente_id = IntegerField("Paciente", validators=[DataRequired()])
    profissional_id = IntegerField("Profissional", validators=[DataRequired()])
    data = DataField("Data", validators=[DataRequired()])
    hora_inicio = HoraField("Início", validators=[DataRequired()])
    hora_fim = HoraField("Fim", validators=[DataRequired()])
    procedimento = StringField("Procedimento", validators=[DataRequired(), Length(max=200)])
    observacoes = TextAreaField("Observações", validators=[Optional()])
    status = SelectField("Status", choices=STATUS_CHOICES, validators=[Optional()])


class StatusAgendamentoForm(ApiForm):
    status = SelectField("Status", choices=STATUS_CHOICES)
