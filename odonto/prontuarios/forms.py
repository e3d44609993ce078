from wtforms import IntegerField, StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

from ..api_forms import ApiForm, DataHoraField

# Notação FDI, dentição permanente
DENTES = frozenset(q * 10 + n for q in (1, 2, 3, 4) for n in range(1, 9))

FACES = {
    "V": "V",
    "VESTIBULAR": "V",
    "L": "L",
    "LINGUAL": "L",
    "PALATINA": "L",
    "M": "M",
    "MESIAL": "M",
    "D": "D",
    "DISTAL": "D",
    "O": "O",
    "OCLUSAL": "O",
}


class ProntuarioForm(ApiForm):
    paciente_id = IntegerField("Paciente", validators=[DataRequired()])
    descricao = TextAreaField("Descrição", validators=[DataRequired()])
    procedimento = StringField("Procedimento", validators=[DataRequired(), Length(max=200)])
    observacoes = TextAreaField("Observações", validators=[Optional()])


class ProcedimentoOdontogramaForm(ApiForm):
    dente = IntegerField("Dente", validators=[DataRequired()])
    face = StringField("Face", validators=[DataRequired()])
    procedimento = StringField("Procedimento", validators=[DataRequired(), Length(max=200)])
    observacao = TextAreaField("Observação", validators=[Optional()])
    data = DataHoraField("Data", validators=[Optional()])

    def validate_dente(self, field):
        if field.data not in DENTES:
            raise ValidationError("Dente inválido (use numeração FDI: 11-18, 21-28, 31-38, 41-48)")

    def validate_face(self, field):
        face = FACES.get(str(field.data).strip().upper())
        if face is None:
            raise ValidationError("Face inválida (V, L, M, D ou O)")
        field.data = face
