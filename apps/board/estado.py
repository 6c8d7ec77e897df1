# apps/board/estado.py

"""
Leitura completa do board para (re)sincronização dos clientes
"""

from django.db.models import Prefetch

from apps.core.models import Card

from .reconciliacao import ResumoItem


def _carregar_colunas(board):
    return list(
        board.colunas.prefetch_related(
            Prefetch('cards', queryset=Card.objects.select_related('responsavel').order_by('ordem'))
        ).order_by('ordem')
    )


def _card_para_dict(card):
    return {
        'id': card.id,
        'coluna_id': card.coluna_id,
        'titulo': card.titulo,
        'descricao': card.descricao,
        'prazo': card.prazo.isoformat() if card.prazo else None,
        'atrasado': card.esta_atrasado(),
        'responsavel': str(card.responsavel) if card.responsavel else None,
        'ordem': card.ordem,
    }


def estado_board(board):
    """Board com colunas e cards em ordem ascendente de posição"""
    colunas = []
    for coluna in _carregar_colunas(board):
        cards = list(coluna.cards.all())
        wip = coluna.estado_wip(total=len(cards))
        colunas.append({
            'id': coluna.id,
            'titulo': coluna.titulo,
            'cor': coluna.cor,
            'ordem': coluna.ordem,
            'limite_wip': coluna.limite_wip,
            'no_limite': wip.no_limite,
            'acima_limite': wip.acima_limite,
            'cards': [_card_para_dict(card) for card in cards],
        })

    return {
        'board_id': board.id,
        'titulo': board.titulo,
        'descricao': board.descricao,
        'colunas': colunas,
    }


def resumos_do_board(board):
    """
    Listas iniciais dos motores de reconciliação

    Retorna (escopos de colunas, escopos de cards): o board é o escopo
    das colunas e cada coluna é o escopo dos seus cards.
    """
    colunas = _carregar_colunas(board)
    escopos_colunas = {
        board.id: [ResumoItem(coluna.id, {'titulo': coluna.titulo}) for coluna in colunas]
    }
    escopos_cards = {
        coluna.id: [ResumoItem(card.id, {'titulo': card.titulo}) for card in coluna.cards.all()]
        for coluna in colunas
    }
    return escopos_colunas, escopos_cards
