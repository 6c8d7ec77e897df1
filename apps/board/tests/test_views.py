# apps/board/tests/test_views.py

import json
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.urls import reverse

from apps.board.erros import FalhaPersistencia
from apps.core.models import Board, Card, Coluna

from .base import DadosBoardMixin


class BoardViewsTestCase(DadosBoardMixin, TestCase):

    def setUp(self):
        self.usuario = self.criar_usuario()
        self.client.force_login(self.usuario)
        self.board = self.criar_board(colunas=['A', 'B'])
        self.coluna_a, self.coluna_b = self.board.colunas_ordenadas()
        self.c1, self.c2, self.c3 = self.criar_cards(self.coluna_a, 'c1', 'c2', 'c3')
        (self.c4,) = self.criar_cards(self.coluna_b, 'c4')

    def post_json(self, nome, dados=None, **kwargs):
        return self.client.post(
            reverse(f'board:{nome}', kwargs=kwargs),
            data=json.dumps(dados or {}),
            content_type='application/json',
        )


class LeituraBoardTest(BoardViewsTestCase):

    def test_estado_completo_em_ordem(self):
        Card.objects.filter(id=self.c1.id).update(ordem=10)

        response = self.client.get(reverse('board:estado', kwargs={'board_id': self.board.id}))

        self.assertEqual(response.status_code, 200)
        dados = response.json()
        self.assertTrue(dados['success'])
        colunas = dados['board']['colunas']
        self.assertEqual([c['id'] for c in colunas], [self.coluna_a.id, self.coluna_b.id])
        self.assertEqual([c['id'] for c in colunas[0]['cards']], [self.c2.id, self.c3.id, self.c1.id])

    def test_exige_login(self):
        self.client.logout()

        response = self.client.get(reverse('board:estado', kwargs={'board_id': self.board.id}))

        self.assertEqual(response.status_code, 302)

    def test_board_inexistente(self):
        response = self.client.get(reverse('board:estado', kwargs={'board_id': 999999}))

        self.assertEqual(response.status_code, 404)


class CriacaoTest(BoardViewsTestCase):

    @override_settings(RAIA_COLUNAS_PADRAO=['Backlog', 'Fazendo', 'Feito'])
    def test_board_novo_com_colunas_padrao(self):
        response = self.post_json('criar_board', {'titulo': 'Novo'})

        self.assertEqual(response.status_code, 201)
        board = Board.objects.get(id=response.json()['board']['board_id'])
        self.assertEqual(board.criado_por, self.usuario)
        self.assertEqual(
            list(board.colunas_ordenadas().values_list('titulo', 'ordem')),
            [('Backlog', 0), ('Fazendo', 1), ('Feito', 2)],
        )

    def test_coluna_nova_vai_para_o_fim(self):
        Coluna.objects.filter(id=self.coluna_b.id).update(ordem=7)

        response = self.post_json('criar_coluna', {'titulo': '  Nova  '}, board_id=self.board.id)

        self.assertEqual(response.status_code, 201)
        coluna = response.json()['coluna']
        self.assertEqual((coluna['titulo'], coluna['ordem']), ('Nova', 8))
        self.assertEqual(Coluna.objects.get(id=coluna['id']).cor, '#6B7280')

    def test_card_novo_vai_para_o_topo(self):
        response = self.post_json('criar_card', {'titulo': 'Novo'}, coluna_id=self.coluna_a.id)

        self.assertEqual(response.status_code, 201)
        card_id = response.json()['card']['id']
        self.assertEqual(self.ids_na_coluna(self.coluna_a), [card_id, self.c1.id, self.c2.id, self.c3.id])
        self.assertEqual(self.ordens_na_coluna(self.coluna_a), [0, 1, 2, 3])

    def test_limite_wip_nao_bloqueia_criacao(self):
        Coluna.objects.filter(id=self.coluna_b.id).update(limite_wip=1)

        response = self.post_json('criar_card', {'titulo': 'Excedente'}, coluna_id=self.coluna_b.id)

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()['coluna']['acima_limite'])

    def test_titulo_obrigatorio(self):
        response = self.post_json('criar_card', {'titulo': '   '}, coluna_id=self.coluna_a.id)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Card.objects.filter(coluna=self.coluna_a).count(), 3)


class ReordenacaoTest(BoardViewsTestCase):

    def test_reordenar_cards(self):
        ids = [self.c3.id, self.c1.id, self.c2.id]

        response = self.post_json('reordenar_cards', {'card_ids': ids}, coluna_id=self.coluna_a.id)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.ids_na_coluna(self.coluna_a), ids)

    def test_reordenar_colunas(self):
        ids = [self.coluna_b.id, self.coluna_a.id]

        response = self.post_json('reordenar_colunas', {'coluna_ids': ids}, board_id=self.board.id)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(list(self.board.colunas_ordenadas().values_list('id', flat=True)), ids)

    def test_pedidos_malformados(self):
        casos = {
            'duplicados': [self.c1.id, self.c1.id, self.c2.id],
            'faltando': [self.c1.id, self.c2.id],
            'de outra coluna': [self.c1.id, self.c2.id, self.c3.id, self.c4.id],
            'não inteiros': ['a', 'b', 'c'],
            'não lista': 'c1,c2,c3',
        }
        for nome, ids in casos.items():
            with self.subTest(caso=nome):
                response = self.post_json('reordenar_cards', {'card_ids': ids}, coluna_id=self.coluna_a.id)
                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.json()['success'])

        self.assertEqual(self.ordens_na_coluna(self.coluna_a), [0, 1, 2])
        self.assertEqual(self.ids_na_coluna(self.coluna_a), [self.c1.id, self.c2.id, self.c3.id])

    def test_json_invalido(self):
        response = self.client.post(
            reverse('board:reordenar_cards', kwargs={'coluna_id': self.coluna_a.id}),
            data='{nao e json',
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 400)

    def test_coluna_inexistente(self):
        response = self.post_json('reordenar_cards', {'card_ids': [self.c1.id]}, coluna_id=999999)

        self.assertEqual(response.status_code, 404)

    def test_falha_do_banco_responde_500(self):
        with patch('apps.board.persistencia.reordenar_escopo', side_effect=FalhaPersistencia('sem conexão')):
            response = self.post_json(
                'reordenar_cards', {'card_ids': [self.c3.id, self.c2.id, self.c1.id]}, coluna_id=self.coluna_a.id
            )

        self.assertEqual(response.status_code, 500)
        self.assertFalse(response.json()['success'])


class MovimentoTest(BoardViewsTestCase):

    def test_mover_para_outra_coluna(self):
        response = self.post_json(
            'mover_card',
            {
                'coluna_destino_id': self.coluna_b.id,
                'ids_destino': [self.c2.id, self.c4.id],
                'ids_origem': [self.c1.id, self.c3.id],
            },
            card_id=self.c2.id,
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.ids_na_coluna(self.coluna_a), [self.c1.id, self.c3.id])
        self.assertEqual(self.ids_na_coluna(self.coluna_b), [self.c2.id, self.c4.id])

    def test_mover_na_mesma_coluna_reordena(self):
        response = self.post_json(
            'mover_card',
            {
                'coluna_destino_id': self.coluna_a.id,
                'ids_destino': [self.c2.id, self.c1.id, self.c3.id],
                'ids_origem': [],
            },
            card_id=self.c2.id,
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.ids_na_coluna(self.coluna_a), [self.c2.id, self.c1.id, self.c3.id])

    def test_mover_com_origem_inconsistente_nao_grava(self):
        response = self.post_json(
            'mover_card',
            {
                'coluna_destino_id': self.coluna_b.id,
                'ids_destino': [self.c2.id, self.c4.id],
                'ids_origem': [self.c1.id],
            },
            card_id=self.c2.id,
        )

        self.assertEqual(response.status_code, 400)
        self.c2.refresh_from_db()
        self.assertEqual(self.c2.coluna_id, self.coluna_a.id)

    def test_reatribuir(self):
        response = self.post_json(
            'reatribuir_card', {'coluna_id': self.coluna_b.id, 'ordem': 5}, card_id=self.c1.id
        )

        self.assertEqual(response.status_code, 200)
        self.c1.refresh_from_db()
        self.assertEqual((self.c1.coluna_id, self.c1.ordem), (self.coluna_b.id, 5))
        self.assertEqual(self.ordens_na_coluna(self.coluna_a), [1, 2])

    def test_coluna_de_outro_board_rejeitada(self):
        outro_board = self.criar_board('Outro', colunas=['X'])
        (coluna_x,) = outro_board.colunas_ordenadas()

        mover = self.post_json(
            'mover_card',
            {
                'coluna_destino_id': coluna_x.id,
                'ids_destino': [self.c2.id],
                'ids_origem': [self.c1.id, self.c3.id],
            },
            card_id=self.c2.id,
        )
        reatribuir = self.post_json(
            'reatribuir_card', {'coluna_id': coluna_x.id, 'ordem': 0}, card_id=self.c2.id
        )

        for response in (mover, reatribuir):
            with self.subTest(url=response.request['PATH_INFO']):
                self.assertEqual(response.status_code, 400)
                self.assertFalse(response.json()['success'])
        self.c2.refresh_from_db()
        self.assertEqual((self.c2.coluna_id, self.c2.ordem), (self.coluna_a.id, 1))
        self.assertFalse(Card.objects.filter(coluna=coluna_x).exists())


class ExclusaoELimiteTest(BoardViewsTestCase):

    def test_excluir_card_nao_renumera(self):
        response = self.post_json('excluir_card', card_id=self.c2.id)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.ordens_na_coluna(self.coluna_a), [0, 2])

    def test_excluir_coluna_movendo_cards(self):
        response = self.post_json(
            'excluir_coluna', {'mover_cards_para': self.coluna_b.id}, coluna_id=self.coluna_a.id
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['cards_movidos'], [self.c1.id, self.c2.id, self.c3.id])
        self.assertEqual(
            self.ids_na_coluna(self.coluna_b), [self.c4.id, self.c1.id, self.c2.id, self.c3.id]
        )

    def test_limite_wip(self):
        casos = [(3, 3), ('', None), (0, None), (None, None)]
        for valor, esperado in casos:
            with self.subTest(valor=valor):
                response = self.post_json('limite_wip', {'limite_wip': valor}, coluna_id=self.coluna_a.id)

                self.assertEqual(response.status_code, 200)
                self.coluna_a.refresh_from_db()
                self.assertEqual(self.coluna_a.limite_wip, esperado)

    def test_limite_wip_no_limite(self):
        response = self.post_json('limite_wip', {'limite_wip': 3}, coluna_id=self.coluna_a.id)

        coluna = response.json()['coluna']
        self.assertTrue(coluna['no_limite'])
        self.assertFalse(coluna['acima_limite'])

    def test_limite_wip_negativo(self):
        response = self.post_json('limite_wip', {'limite_wip': -1}, coluna_id=self.coluna_a.id)

        self.assertEqual(response.status_code, 400)
