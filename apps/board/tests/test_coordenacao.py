# apps/board/tests/test_coordenacao.py

from django.test import SimpleTestCase, TestCase

from apps.board.coordenacao import CoordenadorMovimento, GatewayBanco
from apps.board.erros import FalhaPersistencia
from apps.board.estado import resumos_do_board
from apps.board.reconciliacao import (
    AplicarCandidato,
    Cancelar,
    EventoFinalizacao,
    Finalizar,
    Gatilho,
    MotorReconciliacao,
    Origem,
)
from apps.core.models import Card

from .base import DadosBoardMixin


class GatewayFalso:

    def __init__(self, erro=None):
        self.chamadas = []
        self.erro = erro

    def reordenar(self, tipo, escopo_id, ids):
        self.chamadas.append(('reordenar', tipo, escopo_id, tuple(ids)))
        if self.erro:
            raise self.erro

    def mover(self, tipo, item_id, destino_id, ids_destino, ids_origem):
        self.chamadas.append(('mover', tipo, item_id, destino_id, tuple(ids_destino), tuple(ids_origem)))
        if self.erro:
            raise self.erro


def evento(gatilho, origem='A', destino='A', listas=None):
    return EventoFinalizacao(
        tipo='card',
        item_id=2,
        escopo_origem=origem,
        escopo_destino=destino,
        gatilho=gatilho,
        origem=Origem.PONTEIRO,
        listas=listas or {},
    )


class CoordenadorMovimentoTest(SimpleTestCase):

    def test_mesmo_escopo_reordena_uma_vez(self):
        gateway = GatewayFalso()

        resultado = CoordenadorMovimento(gateway).processar(
            evento(Gatilho.ZONA_ORIGINAL, listas={'A': (2, 1, 3)})
        )

        self.assertTrue(resultado.sucesso)
        self.assertEqual(resultado.chamadas, ('reordenar',))
        self.assertEqual(gateway.chamadas, [('reordenar', 'card', 'A', (2, 1, 3))])

    def test_outro_escopo_move_com_as_duas_listas(self):
        gateway = GatewayFalso()

        resultado = CoordenadorMovimento(gateway).processar(
            evento(Gatilho.NOVA_ZONA, 'A', 'B', {'B': (2, 4), 'A': (1, 3)})
        )

        self.assertTrue(resultado.sucesso)
        self.assertEqual(gateway.chamadas, [('mover', 'card', 2, 'B', (2, 4), (1, 3))])

    def test_cancelado_nao_escreve(self):
        gateway = GatewayFalso()

        resultado = CoordenadorMovimento(gateway).processar(evento(Gatilho.CANCELADO))

        self.assertTrue(resultado.sucesso)
        self.assertEqual(resultado.chamadas, ())
        self.assertEqual(gateway.chamadas, [])

    def test_falha_vira_resultado_sem_nova_tentativa(self):
        gateway = GatewayFalso(erro=FalhaPersistencia('conexão perdida'))

        with self.assertLogs('apps.board.coordenacao', level='WARNING'):
            resultado = CoordenadorMovimento(gateway).processar(
                evento(Gatilho.ZONA_ORIGINAL, listas={'A': (1, 2)})
            )

        self.assertFalse(resultado.sucesso)
        self.assertEqual(resultado.erro, 'conexão perdida')
        self.assertEqual(len(gateway.chamadas), 1)


class MovimentoPontaAPontaTest(DadosBoardMixin, TestCase):
    """Motor + coordenador + banco, como no arraste real"""

    def setUp(self):
        self.board = self.criar_board(colunas=['A', 'B'])
        self.coluna_a, self.coluna_b = self.board.colunas_ordenadas()
        self.c1, self.c2, self.c3 = self.criar_cards(self.coluna_a, 'c1', 'c2', 'c3')
        (self.c4,) = self.criar_cards(self.coluna_b, 'c4')

        _, escopos_cards = resumos_do_board(self.board)
        self.coordenador = CoordenadorMovimento(GatewayBanco())
        self.resultados = []
        self.motor = MotorReconciliacao(
            'card',
            escopos_cards,
            ao_finalizar=lambda ev: self.resultados.append(self.coordenador.processar(ev)),
        )

    def candidatos(self, origem, destino):
        local = {item.id: item for itens in self.motor.estado.local.values() for item in itens}
        return {
            self.coluna_a.id: [local[card.id] for card in origem],
            self.coluna_b.id: [local[card.id] for card in destino],
        }

    def test_arrastar_c2_para_o_topo_de_b(self):
        candidatos = self.candidatos([self.c1, self.c3], [self.c2, self.c4])

        self.motor.despachar(AplicarCandidato(self.c2.id, candidatos))
        evento_final = self.motor.despachar(Finalizar(self.c2.id, candidatos))

        self.assertEqual(evento_final.escopo_origem, self.coluna_a.id)
        self.assertEqual(evento_final.escopo_destino, self.coluna_b.id)
        self.assertEqual(len(self.resultados), 1)
        self.assertTrue(self.resultados[0].sucesso)

        self.assertEqual(self.ids_na_coluna(self.coluna_a), [self.c1.id, self.c3.id])
        self.assertEqual(self.ordens_na_coluna(self.coluna_a), [0, 1])
        self.assertEqual(self.ids_na_coluna(self.coluna_b), [self.c2.id, self.c4.id])
        self.assertEqual(self.ordens_na_coluna(self.coluna_b), [0, 1])
        self.c2.refresh_from_db()
        self.assertEqual(self.c2.coluna_id, self.coluna_b.id)

    def test_item_movido_aparece_em_um_unico_escopo(self):
        candidatos = self.candidatos([self.c2, self.c3], [self.c4, self.c1])

        self.motor.despachar(Finalizar(self.c1.id, candidatos))

        leituras = [self.ids_na_coluna(self.coluna_a), self.ids_na_coluna(self.coluna_b)]
        self.assertEqual(sum(ids.count(self.c1.id) for ids in leituras), 1)
        self.assertEqual(leituras[0], [self.c2.id, self.c3.id])
        self.assertEqual(leituras[1], [self.c4.id, self.c1.id])

    def test_cancelar_nao_altera_posicoes(self):
        antes = list(Card.objects.order_by('id').values_list('id', 'coluna_id', 'ordem'))

        self.motor.despachar(AplicarCandidato(self.c2.id, self.candidatos([self.c1, self.c3], [self.c2, self.c4])))
        self.motor.despachar(AplicarCandidato(self.c2.id, self.candidatos([self.c1, self.c3], [self.c4, self.c2])))
        self.motor.despachar(Cancelar())

        self.assertEqual(self.resultados, [])
        self.assertEqual(list(Card.objects.order_by('id').values_list('id', 'coluna_id', 'ordem')), antes)
