# apps/board/views.py

import json
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.core.models import Board, Card, Coluna

from . import persistencia
from .erros import FalhaPersistencia, ReordenacaoInvalida
from .estado import estado_board
from .forms import (
    BoardForm,
    CardForm,
    ColunaForm,
    ExcluirColunaForm,
    LimiteWipForm,
    MoverCardForm,
    ReatribuirCardForm,
    ReordenarCardsForm,
    ReordenarColunasForm,
)
from .notificacoes import notificar_board
from .posicionamento import inserir_no_fim, inserir_no_topo
from .wip import verificar_gargalos_wip

logger = logging.getLogger(__name__)


# === Auxiliares ===

def _dados_requisicao(request):
    """Corpo JSON (drag-and-drop) ou formulário tradicional"""
    if request.content_type == 'application/json':
        try:
            dados = json.loads(request.body or b'{}')
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
        return dados if isinstance(dados, dict) else None
    return request.POST


def _erro(mensagem, status=400, **extra):
    return JsonResponse({'success': False, 'error': mensagem, **extra}, status=status)


def _erro_form(form):
    return _erro('Dados inválidos', erros=form.errors.get_json_data())


def _erro_ordenacao(erro):
    """Rejeição antes da escrita vira 400; falha do banco vira 500"""
    if isinstance(erro, FalhaPersistencia):
        return _erro('Falha ao gravar no banco de dados', status=500)
    return _erro(str(erro))


def _card_resumo(card):
    return {
        'id': card.id,
        'coluna_id': card.coluna_id,
        'titulo': card.titulo,
        'ordem': card.ordem,
    }


def _coluna_resumo(coluna, total=None):
    wip = coluna.estado_wip(total=total)
    return {
        'id': coluna.id,
        'board_id': coluna.board_id,
        'titulo': coluna.titulo,
        'ordem': coluna.ordem,
        'limite_wip': coluna.limite_wip,
        'no_limite': wip.no_limite,
        'acima_limite': wip.acima_limite,
    }


# === Board ===

@login_required
@require_GET
def board_estado_view(request, board_id):
    """
    Leitura completa do board

    Usada no carregamento e em toda ressincronização: substitui qualquer
    lista otimista que o cliente tenha.
    """
    board = get_object_or_404(Board, id=board_id)

    return JsonResponse({
        'success': True,
        'board': estado_board(board),
        'gargalos': verificar_gargalos_wip(board),
        'websocket_group': f'board_{board.id}',
    })


@login_required
@require_POST
@csrf_exempt
def criar_board(request):
    """Cria board; as colunas padrão são criadas pelo signal"""
    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = BoardForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    board = form.save(commit=False)
    board.criado_por = request.user
    board.save()

    return JsonResponse({'success': True, 'board': estado_board(board)}, status=201)


# === Colunas ===

@login_required
@require_POST
@csrf_exempt
def criar_coluna(request, board_id):
    """Nova coluna sempre entra na última posição do board"""
    board = get_object_or_404(Board, id=board_id)

    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = ColunaForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    coluna = inserir_no_fim(Coluna, board.id, **form.cleaned_data)
    notificar_board(board.id, 'coluna_criada', request.user, coluna_id=coluna.id)

    return JsonResponse({'success': True, 'coluna': _coluna_resumo(coluna, total=0)}, status=201)


@login_required
@require_POST
@csrf_exempt
def reordenar_colunas(request, board_id):
    """Grava a ordem final das colunas do board (ordem = índice)"""
    board = get_object_or_404(Board, id=board_id)

    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = ReordenarColunasForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    try:
        persistencia.reordenar_escopo(Coluna, board.id, form.cleaned_data['coluna_ids'])
    except (ReordenacaoInvalida, FalhaPersistencia) as e:
        logger.warning(f"⚠️ Reordenação de colunas rejeitada no board {board.id}: {e}")
        return _erro_ordenacao(e)

    notificar_board(board.id, 'colunas_reordenadas', request.user)
    return JsonResponse({'success': True})


@login_required
@require_POST
@csrf_exempt
def atualizar_limite_wip(request, coluna_id):
    """Limite WIP é apenas indicativo"""
    coluna = get_object_or_404(Coluna, id=coluna_id)

    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = LimiteWipForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    coluna.limite_wip = form.cleaned_data['limite_wip']
    coluna.save(update_fields=['limite_wip', 'atualizado_em'])
    notificar_board(coluna.board_id, 'limite_wip_alterado', request.user, coluna_id=coluna.id)

    return JsonResponse({'success': True, 'coluna': _coluna_resumo(coluna)})


@login_required
@require_POST
@csrf_exempt
def excluir_coluna(request, coluna_id):
    """
    Exclui coluna; opcionalmente move os cards para o fim de outra
    """
    coluna = get_object_or_404(Coluna, id=coluna_id)
    board_id = coluna.board_id

    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = ExcluirColunaForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    try:
        movidos = persistencia.excluir_coluna(coluna, form.cleaned_data['mover_cards_para'])
    except (ReordenacaoInvalida, FalhaPersistencia) as e:
        return _erro_ordenacao(e)

    notificar_board(board_id, 'coluna_excluida', request.user, coluna_id=coluna_id)
    return JsonResponse({'success': True, 'cards_movidos': [card.id for card in movidos]})


# === Cards ===

@login_required
@require_POST
@csrf_exempt
def criar_card(request, coluna_id):
    """
    Novo card entra no topo da coluna

    O limite WIP não bloqueia a criação; o estado volta na resposta
    apenas para exibição.
    """
    coluna = get_object_or_404(Coluna, id=coluna_id)

    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = CardForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    card = inserir_no_topo(Card, coluna.id, **form.cleaned_data)
    notificar_board(coluna.board_id, 'card_criado', request.user, card_id=card.id)

    return JsonResponse({
        'success': True,
        'card': _card_resumo(card),
        'coluna': _coluna_resumo(coluna),
    }, status=201)


@login_required
@require_POST
@csrf_exempt
def reordenar_cards(request, coluna_id):
    """Grava a ordem final dos cards de uma coluna (ordem = índice)"""
    coluna = get_object_or_404(Coluna, id=coluna_id)

    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = ReordenarCardsForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    try:
        persistencia.reordenar_escopo(Card, coluna.id, form.cleaned_data['card_ids'])
    except (ReordenacaoInvalida, FalhaPersistencia) as e:
        logger.warning(f"⚠️ Reordenação de cards rejeitada na coluna {coluna.id}: {e}")
        return _erro_ordenacao(e)

    notificar_board(coluna.board_id, 'cards_reordenados', request.user, coluna_id=coluna.id)
    return JsonResponse({'success': True})


@login_required
@require_POST
@csrf_exempt
def reatribuir_card(request, card_id):
    """Troca coluna e posição do card em uma única escrita"""
    card = get_object_or_404(Card.objects.select_related('coluna'), id=card_id)

    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = ReatribuirCardForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    nova_coluna = get_object_or_404(Coluna, id=form.cleaned_data['coluna_id'])
    if nova_coluna.board_id != card.coluna.board_id:
        return _erro('Coluna de destino pertence a outro board')

    try:
        card = persistencia.reatribuir_escopo(
            Card, card.id, form.cleaned_data['coluna_id'], form.cleaned_data['ordem']
        )
    except (ReordenacaoInvalida, FalhaPersistencia) as e:
        return _erro_ordenacao(e)

    notificar_board(card.coluna.board_id, 'card_reatribuido', request.user, card_id=card.id)
    return JsonResponse({'success': True, 'card': _card_resumo(card)})


@login_required
@require_POST
@csrf_exempt
def mover_card(request, card_id):
    """
    Drop de um card arrastado

    Mesma coluna: reordena. Outra coluna: reatribuição + reordenação de
    destino e origem em uma única transação.
    """
    card = get_object_or_404(Card.objects.select_related('coluna'), id=card_id)
    coluna_anterior = card.coluna

    dados = _dados_requisicao(request)
    if dados is None:
        return _erro('JSON inválido')

    form = MoverCardForm(dados)
    if not form.is_valid():
        return _erro_form(form)

    destino_id = form.cleaned_data['coluna_destino_id']
    nova_coluna = get_object_or_404(Coluna, id=destino_id)
    if nova_coluna.board_id != coluna_anterior.board_id:
        return _erro('Coluna de destino pertence a outro board')

    try:
        if destino_id == coluna_anterior.id:
            persistencia.reordenar_escopo(Card, destino_id, form.cleaned_data['ids_destino'])
        else:
            persistencia.mover_entre_escopos(
                Card,
                card.id,
                destino_id,
                form.cleaned_data['ids_destino'],
                form.cleaned_data['ids_origem'],
            )
    except (ReordenacaoInvalida, FalhaPersistencia) as e:
        logger.warning(f"⚠️ Movimento do card {card.id} rejeitado: {e}")
        return _erro_ordenacao(e)

    notificar_board(
        nova_coluna.board_id,
        'card_movido',
        request.user,
        card_id=card.id,
        coluna_anterior=coluna_anterior.titulo,
        nova_coluna=nova_coluna.titulo,
    )

    return JsonResponse({
        'success': True,
        'message': f'Card movido para {nova_coluna.titulo}',
        'coluna': _coluna_resumo(nova_coluna),
    })


@login_required
@require_POST
@csrf_exempt
def excluir_card(request, card_id):
    """Exclui o card sem renumerar os irmãos"""
    card = get_object_or_404(Card.objects.select_related('coluna'), id=card_id)
    board_id = card.coluna.board_id

    card.delete()
    notificar_board(board_id, 'card_excluido', request.user, card_id=card_id)

    return JsonResponse({'success': True})
