from wtforms import SelectField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional

from ..api_forms import CPF, ApiForm, DataField
from ..pacientes.forms import AvatarForm, StatusForm  # noqa: F401 - mesmas regras
from .models import ESPECIALIDADES


class ProfissionalForm(ApiForm):
    nome = StringField("Nome", validators=[DataRequired(), Length(min=3, max=120)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    telefone = StringField("Telefone", validators=[DataRequired(), Length(max=20)])
    cro = StringField("CRO", validators=[DataRequired(), Length(max=20)])
    especialidade = SelectField("Especialidade", choices=list(ESPECIALIDADES.items()))
    data_nascimento = DataField("Data de Nascimento", validators=[DataRequired()])
    cpf = StringField("CPF", validators=[DataRequired(), CPF()])
    rg = StringField("RG", validators=[Optional(), Length(max=20)])
    cep = StringField("CEP", validators=[Optional(), Length(max=10)])
    logradouro = StringField("Logradouro", validators=[Optional(), Length(max=200)])
    numero = StringField("Número", validators=[Optional(), Length(max=20)])
    complemento = StringField("Complemento", validators=[Optional(), Length(max=100)])
    bairro = StringField("Bairro", validators=[Optional(), Length(max=100)])
    cidade = StringField("Cidade", validators=[Optional(), Length(max=100)])
    estado = StringField("Estado", validators=[Optional(), Length(min=2, max=2)])
