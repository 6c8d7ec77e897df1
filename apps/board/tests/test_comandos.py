# apps/board/tests/test_comandos.py

from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from apps.board.ordenacao import ordens_duplicadas
from apps.core.models import Board, Card

from .base import DadosBoardMixin


@override_settings(RAIA_COLUNAS_PADRAO=['Backlog', 'Em Progresso', 'Em Revisão', 'Concluído'])
class SeedTest(TestCase):

    def test_cria_board_demo_com_ordem_consistente(self):
        call_command('seed', stdout=StringIO())

        board = Board.objects.get(titulo='Board de Demonstração')
        colunas = list(board.colunas_ordenadas())
        self.assertEqual([c.titulo for c in colunas], ['Backlog', 'Em Progresso', 'Em Revisão', 'Concluído'])
        self.assertEqual([c.ordem for c in colunas], [0, 1, 2, 3])

        backlog = colunas[0]
        self.assertEqual(
            [card.titulo for card in backlog.cards_ordenados()],
            ['Mapear fluxo de cadastro', 'Definir métricas do quadro', 'Revisar textos da home'],
        )
        for coluna in colunas:
            self.assertEqual(ordens_duplicadas(coluna.cards.all()), [])


class VerificarOrdemTest(DadosBoardMixin, TestCase):

    def test_ordem_consistente(self):
        board = self.criar_board(colunas=['A', 'B'])
        self.criar_cards(board.colunas.first(), 'c1', 'c2', ordens=[0, 4])
        saida = StringIO()

        call_command('verificar_ordem', stdout=saida)

        self.assertIn('Ordem consistente', saida.getvalue())

    def test_ordem_repetida_falha(self):
        board = self.criar_board(colunas=['A'])
        coluna = board.colunas.get()
        self.criar_cards(coluna, 'c1', 'c2', ordens=[1, 1])
        saida = StringIO()

        with self.assertRaises(CommandError):
            call_command('verificar_ordem', stdout=saida)

        self.assertIn(f'coluna {coluna.id}', saida.getvalue())

    def test_board_inexistente(self):
        with self.assertRaises(CommandError):
            call_command('verificar_ordem', board=999999, stdout=StringIO())


class ColunasPadraoTest(TestCase):

    @override_settings(RAIA_COLUNAS_PADRAO=['Fazer', 'Feito'])
    def test_board_novo_recebe_colunas_em_ordem(self):
        board = Board.objects.create(titulo='Sinal')

        self.assertEqual(
            list(board.colunas_ordenadas().values_list('titulo', 'ordem')),
            [('Fazer', 0), ('Feito', 1)],
        )

    def test_excluir_card_deixa_lacuna(self):
        with override_settings(RAIA_COLUNAS_PADRAO=['A']):
            board = Board.objects.create(titulo='Lacuna')
        coluna = board.colunas.get()
        cards = [Card.objects.create(coluna=coluna, titulo=t, ordem=i) for i, t in enumerate('xyz')]

        cards[1].delete()

        self.assertEqual(list(coluna.cards_ordenados().values_list('ordem', flat=True)), [0, 2])
