from flask import Blueprint, jsonify
from wtforms import BooleanField, Form, FormField, IntegerField, StringField
from wtforms.validators import DataRequired, Email, InputRequired, Length, NumberRange, Optional

from .. import db
from ..api_forms import ApiForm
from ..utils_db import key_lock, retry_on_busy
from .models import CONFIG_ID, Configuracao

configuracoes_bp = Blueprint("configuracoes", __name__)


class EnderecoForm(Form):
    cep = StringField("CEP", validators=[DataRequired(), Length(max=10)])
    logradouro = StringField("Logradouro", validators=[DataRequired(), Length(max=200)])
    numero = StringField("Número", validators=[DataRequired(), Length(max=20)])
    complemento = StringField("Complemento", validators=[Optional(), Length(max=100)])
    bairro = StringField("Bairro", validators=[DataRequired(), Length(max=100)])
    cidade = StringField("Cidade", validators=[DataRequired(), Length(max=100)])
    estado = StringField("Estado", validators=[DataRequired(), Length(min=2, max=2)])


class ClinicaForm(Form):
    nome = StringField("Nome", validators=[DataRequired(), Length(min=3, max=120)])
    cnpj = StringField("CNPJ", validators=[DataRequired(), Length(max=20)])
    telefone = StringField("Telefone", validators=[DataRequired(), Length(max=20)])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=120)])
    endereco = FormField(EnderecoForm)


class NotificacoesForm(Form):
    email_agendamento = BooleanField("Email de agendamento")
    email_lembrete = BooleanField("Email de lembrete")
    whatsapp_lembrete = BooleanField("WhatsApp de lembrete")


class FinanceiroConfigForm(Form):
    dias_vencimento = IntegerField(
        "Dias para vencimento", validators=[InputRequired(), NumberRange(min=1, max=90)]
    )
    lembrete_antecedencia = IntegerField(
        "Antecedência do lembrete", validators=[InputRequired(), NumberRange(min=1, max=30)]
    )


class ConfiguracaoForm(ApiForm):
    clinica = FormField(ClinicaForm)
    notificacoes = FormField(NotificacoesForm)
    financeiro = FormField(FinanceiroConfigForm)


@configuracoes_bp.route("/", methods=["GET"])
def obter():
    # Leitura nunca grava: sem linha salva, devolve os padrões
    return jsonify(Configuracao.atual().to_dict())


@configuracoes_bp.route("/", methods=["PUT"])
@retry_on_busy
def salvar():
    dados = ConfiguracaoForm().validar().dados()
    with key_lock("configuracoes"):
        config = db.session.get(Configuracao, CONFIG_ID)
        if config is None:
            config = Configuracao(id=CONFIG_ID)
            db.session.add(config)
        config.aplicar(dados)
        db.session.commit()
    return jsonify(config.to_dict())
