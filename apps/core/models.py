# apps/core/models.py

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


class Usuario(AbstractUser):
    """
    Modelo de usuário customizado

    Usado como responsável pelos cards e criador dos boards.
    """

    telefone = models.CharField(max_length=20, blank=True)

    # === METADADOS ===
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'usuario'

    def __str__(self):
        return self.get_full_name() or self.username


class Board(models.Model):
    """Quadro Kanban - escopo que contém colunas ordenadas"""

    titulo = models.CharField(max_length=200)
    descricao = models.TextField(blank=True)
    criado_por = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='boards_criados'
    )
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['titulo']

    def __str__(self):
        return self.titulo

    def colunas_ordenadas(self):
        """Colunas na ordem canônica (ordem ascendente)"""
        return self.colunas.order_by('ordem')


class ItemOrdenavel(models.Model):
    """
    Classe abstrata base para itens com posição dentro de um escopo pai

    CAMPO_ESCOPO é o nome da ForeignKey que aponta para o escopo:
    'board' para colunas, 'coluna' para cards. A ordem só tem
    significado relativo dentro do mesmo escopo.
    """

    CAMPO_ESCOPO = None

    ordem = models.IntegerField(default=0)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @classmethod
    def filtro_escopo(cls, escopo_id):
        """Kwargs de filtro para os itens de um escopo"""
        return {f'{cls.CAMPO_ESCOPO}_id': escopo_id}

    @classmethod
    def modelo_escopo(cls):
        """Model do escopo pai (Board ou Coluna)"""
        return cls._meta.get_field(cls.CAMPO_ESCOPO).related_model

    @property
    def escopo_id(self):
        return getattr(self, f'{self.CAMPO_ESCOPO}_id')


class Coluna(ItemOrdenavel):
    """Coluna do board Kanban"""

    CAMPO_ESCOPO = 'board'

    titulo = models.CharField(max_length=100)
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='colunas'
    )
    limite_wip = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Work In Progress - vazio = sem limite (apenas indicativo)"
    )
    cor = models.CharField(max_length=7, default='#6B7280')

    class Meta:
        db_table = 'coluna'
        ordering = ['ordem']
        indexes = [
            models.Index(fields=['board', 'ordem'], name='coluna_board_ordem_idx'),
        ]

    def __str__(self):
        return f"{self.titulo} - {self.board.titulo}"

    def cards_ordenados(self):
        return self.cards.order_by('ordem')

    def estado_wip(self, total=None):
        """Estado WIP para exibição; nunca bloqueia inserções"""
        from apps.board.wip import avaliar_wip

        if total is None:
            total = self.cards.count()
        return avaliar_wip(total, self.limite_wip)


class Card(ItemOrdenavel):
    """Card de uma coluna"""

    CAMPO_ESCOPO = 'coluna'

    titulo = models.CharField(max_length=500)
    descricao = models.TextField(blank=True)
    coluna = models.ForeignKey(
        Coluna,
        on_delete=models.CASCADE,
        related_name='cards'
    )
    responsavel = models.ForeignKey(
        Usuario,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cards_responsavel'
    )
    prazo = models.DateField(null=True, blank=True)

    class Meta:
        db_table = 'card'
        ordering = ['ordem']
        indexes = [
            models.Index(fields=['coluna', 'ordem'], name='card_coluna_ordem_idx'),
        ]

    def __str__(self):
        return self.titulo

    def esta_atrasado(self):
        """Verifica se o card passou do prazo"""
        if self.prazo:
            return timezone.now().date() > self.prazo
        return False
