from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length, Optional

from ..api_forms import CPF, ApiForm, DataField, UploadForm
from ..uploads import IMAGENS


class PacienteForm(ApiForm):
    nome = StringField("Nome", validators=[DataRequired(), Length(min=3, max=100)])
    cpf = StringField("CPF", validators=[DataRequired(), CPF()])
    data_nascimento = DataField("Data de Nascimento", validators=[DataRequired()])
    genero = StringField("Gênero", validators=[Optional(), Length(max=20)])
    email = StringField("Email", validators=[Optional(), Email(), Length(max=120)])
    telefone_celular = StringField("Celular", validators=[DataRequired(), Length(max=20)])
    telefone_fixo = StringField("Telefone", validators=[Optional(), Length(max=20)])
    cep = StringField("CEP", validators=[Optional(), Length(max=10)])
    logradouro = StringField("Logradouro", validators=[Optional(), Length(max=200)])
    numero = StringField("Número", validators=[Optional(), Length(max=20)])
    complemento = StringField("Complemento", validators=[Optional(), Length(max=100)])
    bairro = StringField("Bairro", validators=[Optional(), Length(max=100)])
    cidade = StringField("Cidade", validators=[Optional(), Length(max=100)])
    estado = StringField("Estado", validators=[Optional(), Length(min=2, max=2)])
    contato_emergencia_nome = StringField("Contato Emergência", validators=[Optional(), Length(max=100)])
    contato_emergencia_telefone = StringField(
        "Telefone Emergência", validators=[Optional(), Length(max=20)]
    )
    contato_emergencia_parentesco = StringField("Parentesco", validators=[Optional(), Length(max=50)])
    historico_medico = TextAreaField("Histórico Médico", validators=[Optional()])


class StatusForm(ApiForm):
    status = SelectField("Status", choices=[("ativo", "Ativo"), ("inativo", "Inativo")])


class AvatarForm(UploadForm):
    avatar = FileField(
        "Avatar",
        validators=[
            FileRequired("Arquivo não enviado"),
            FileAllowed(IMAGENS, "Tipo de arquivo inválido."),
        ],
    )
