# apps/board/forms.py

from django import forms
from django.core.exceptions import ValidationError

from apps.core.models import Board, Card, Coluna


class ListaIdsField(forms.Field):
    """Lista JSON de ids inteiros, sem repetição"""

    default_error_messages = {
        'invalido': 'Informe uma lista de ids inteiros.',
        'duplicado': 'A lista contém ids repetidos.',
        'vazia': 'A lista não pode ser vazia.',
    }

    def __init__(self, *, permitir_vazia=False, **kwargs):
        self.permitir_vazia = permitir_vazia
        kwargs.setdefault('required', False)
        super().__init__(**kwargs)

    def to_python(self, value):
        if value in (None, ''):
            value = []
        if not isinstance(value, (list, tuple)):
            raise ValidationError(self.error_messages['invalido'], code='invalido')
        if any(isinstance(v, bool) or not isinstance(v, int) for v in value):
            raise ValidationError(self.error_messages['invalido'], code='invalido')
        return list(value)

    def validate(self, value):
        super().validate(value)
        if not value and not self.permitir_vazia:
            raise ValidationError(self.error_messages['vazia'], code='vazia')
        if len(set(value)) != len(value):
            raise ValidationError(self.error_messages['duplicado'], code='duplicado')


class BoardForm(forms.ModelForm):
    """Criação de board"""

    class Meta:
        model = Board
        fields = ['titulo', 'descricao']


class ColunaForm(forms.ModelForm):
    """Criação de coluna; a posição é definida no fim do board"""

    class Meta:
        model = Coluna
        fields = ['titulo', 'cor']

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['cor'].required = False

    def clean_cor(self):
        return self.cleaned_data.get('cor') or Coluna._meta.get_field('cor').default

    def clean_titulo(self):
        titulo = self.cleaned_data['titulo'].strip()
        if not titulo:
            raise ValidationError('Nome da coluna é obrigatório')
        return titulo


class CardForm(forms.ModelForm):
    """Criação de card; a posição é sempre o topo da coluna"""

    class Meta:
        model = Card
        fields = ['titulo', 'descricao', 'prazo', 'responsavel']

    def clean_titulo(self):
        titulo = self.cleaned_data['titulo'].strip()
        if not titulo:
            raise ValidationError('Título do card é obrigatório')
        return titulo


class LimiteWipForm(forms.Form):
    """Vazio ou 0 removem o limite"""

    limite_wip = forms.IntegerField(min_value=0, required=False)

    def clean_limite_wip(self):
        limite = self.cleaned_data.get('limite_wip')
        return limite or None


class ReordenarColunasForm(forms.Form):
    coluna_ids = ListaIdsField()


class ReordenarCardsForm(forms.Form):
    card_ids = ListaIdsField()


class ReatribuirCardForm(forms.Form):
    coluna_id = forms.IntegerField()
    ordem = forms.IntegerField()


class MoverCardForm(forms.Form):
    coluna_destino_id = forms.IntegerField()
    ids_destino = ListaIdsField()
    ids_origem = ListaIdsField(permitir_vazia=True)


class ExcluirColunaForm(forms.Form):
    mover_cards_para = forms.IntegerField(required=False)
