# apps/board/persistencia.py

"""
Persistência da ordem dos itens

Toda escrita de ``ordem`` e de escopo pai depois da criação passa por
aqui. Cada operação roda em uma única transação: ou todas as posições
mudam ou nenhuma muda.
"""

import logging
from collections import Counter

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.core.models import Card, Coluna

from .erros import FalhaPersistencia, ReordenacaoInvalida
from .ordenacao import itens_do_escopo, travar_escopo
from .posicionamento import anexar_ao_fim

logger = logging.getLogger(__name__)


def _validar_ids(ids):
    if isinstance(ids, (str, bytes)) or not isinstance(ids, (list, tuple)):
        raise ReordenacaoInvalida("Lista de ids inválida")

    duplicados = [item_id for item_id, total in Counter(ids).items() if total > 1]
    if duplicados:
        raise ReordenacaoInvalida(f"Ids duplicados: {duplicados}")
    return list(ids)


def _travar_ou_rejeitar(modelo, escopo_id):
    try:
        return travar_escopo(modelo, escopo_id)
    except ObjectDoesNotExist:
        raise ReordenacaoInvalida(f"Escopo {escopo_id} não encontrado")


def _escrever_ordem(modelo, escopo_id, ids):
    """Valida os membros e grava ordem = índice; requer transação aberta"""
    _travar_ou_rejeitar(modelo, escopo_id)

    membros = set(
        itens_do_escopo(modelo, escopo_id).select_for_update().values_list('id', flat=True)
    )
    if set(ids) != membros:
        faltando = sorted(membros - set(ids))
        estranhos = sorted(set(ids) - membros)
        raise ReordenacaoInvalida(
            f"Ids não correspondem ao escopo {escopo_id} "
            f"(faltando={faltando}, fora do escopo={estranhos})"
        )

    agora = timezone.now()
    filtro = modelo.filtro_escopo(escopo_id)
    for indice, item_id in enumerate(ids):
        modelo.objects.filter(pk=item_id, **filtro).update(ordem=indice, atualizado_em=agora)


def reordenar_escopo(modelo, escopo_id, ids):
    """
    Grava ``ordem = índice`` (base 0) para cada id, na ordem recebida

    Idempotente: repetir a mesma lista produz as mesmas posições.
    Os ids precisam ser exatamente os membros atuais do escopo.
    """
    ids = _validar_ids(ids)

    try:
        with transaction.atomic():
            _escrever_ordem(modelo, escopo_id, ids)
    except DatabaseError as e:
        logger.error(f"❌ Falha ao reordenar {modelo.__name__} no escopo {escopo_id}: {e}")
        raise FalhaPersistencia(str(e)) from e

    logger.info(f"↕️ {len(ids)} {modelo.__name__}(s) reordenados no escopo {escopo_id}")


def _escopo_atual(modelo, item_id):
    """Escopo pai do item, lido sem trava"""
    escopo_id = (
        modelo.objects.filter(pk=item_id)
        .values_list(f'{modelo.CAMPO_ESCOPO}_id', flat=True)
        .first()
    )
    if escopo_id is None:
        raise ReordenacaoInvalida(f"{modelo.__name__} {item_id} não encontrado")
    return escopo_id


def _travar_item(modelo, item_id, escopo_esperado):
    """Trava o item depois dos escopos e confere que ele não mudou de pai"""
    try:
        item = modelo.objects.select_for_update().get(pk=item_id)
    except modelo.DoesNotExist:
        raise ReordenacaoInvalida(f"{modelo.__name__} {item_id} não encontrado")

    if item.escopo_id != escopo_esperado:
        raise ReordenacaoInvalida(
            f"{modelo.__name__} {item_id} mudou de escopo durante o movimento"
        )
    return item


def _travar_para_reatribuir(modelo, item_id, novo_escopo_id):
    """
    Trava origem e destino em ordem crescente de id e só então o item

    Toda escrita trava o escopo antes dos itens dele.
    """
    origem_id = _escopo_atual(modelo, item_id)
    for escopo_id in sorted({origem_id, novo_escopo_id}):
        _travar_ou_rejeitar(modelo, escopo_id)
    return _travar_item(modelo, item_id, origem_id)


def _reatribuir(modelo, item, novo_escopo_id, ordem):
    modelo.objects.filter(pk=item.pk).update(
        ordem=ordem,
        atualizado_em=timezone.now(),
        **modelo.filtro_escopo(novo_escopo_id)
    )
    escopo_anterior = item.escopo_id
    item.refresh_from_db()
    return item, escopo_anterior


def reatribuir_escopo(modelo, item_id, novo_escopo_id, ordem):
    """
    Troca o escopo pai e a posição de um item em uma única escrita

    Não renumera os irmãos de nenhum dos dois escopos.
    """
    if isinstance(ordem, bool) or not isinstance(ordem, int):
        raise ReordenacaoInvalida("Ordem deve ser um inteiro")

    try:
        with transaction.atomic():
            item = _travar_para_reatribuir(modelo, item_id, novo_escopo_id)
            item, escopo_anterior = _reatribuir(modelo, item, novo_escopo_id, ordem)
    except DatabaseError as e:
        logger.error(f"❌ Falha ao reatribuir {modelo.__name__} {item_id}: {e}")
        raise FalhaPersistencia(str(e)) from e

    logger.info(
        f"📦 {modelo.__name__} {item_id} reatribuído: escopo {escopo_anterior} -> {novo_escopo_id} (ordem {ordem})"
    )
    return item


def mover_entre_escopos(modelo, item_id, destino_id, ids_destino, ids_origem):
    """
    Movimento entre escopos em uma única transação

    Reatribui o item ao destino e reordena destino e origem. Se qualquer
    parte falhar nada é gravado, então o item nunca fica com posição em
    um escopo e pai apontando para outro.
    """
    ids_destino = _validar_ids(ids_destino)
    ids_origem = _validar_ids(ids_origem)

    if item_id not in ids_destino:
        raise ReordenacaoInvalida(f"Item {item_id} ausente da lista de destino")
    if item_id in ids_origem:
        raise ReordenacaoInvalida(f"Item {item_id} ainda presente na lista de origem")

    try:
        with transaction.atomic():
            if _escopo_atual(modelo, item_id) == destino_id:
                raise ReordenacaoInvalida(f"Item {item_id} já pertence ao escopo {destino_id}")

            item = _travar_para_reatribuir(modelo, item_id, destino_id)
            origem_id = item.escopo_id

            _reatribuir(modelo, item, destino_id, ids_destino.index(item_id))
            _escrever_ordem(modelo, destino_id, ids_destino)
            _escrever_ordem(modelo, origem_id, ids_origem)
    except DatabaseError as e:
        logger.error(f"❌ Falha ao mover {modelo.__name__} {item_id}: {e}")
        raise FalhaPersistencia(str(e)) from e

    logger.info(f"🔀 {modelo.__name__} {item_id} movido do escopo {origem_id} para {destino_id}")
    return origem_id


def excluir_coluna(coluna, destino_id=None):
    """
    Exclui uma coluna; com destino, seus cards vão para o fim dele

    Os cards movidos mantêm a ordem relativa e recebem posições depois
    do último card do destino. Sem destino, os cards são excluídos junto.
    """
    try:
        with transaction.atomic():
            movidos = []
            if destino_id is not None:
                if destino_id == coluna.id:
                    raise ReordenacaoInvalida("Destino deve ser outra coluna")
                if not Coluna.objects.filter(pk=destino_id, board_id=coluna.board_id).exists():
                    raise ReordenacaoInvalida(f"Coluna {destino_id} não pertence ao board {coluna.board_id}")

                for escopo_id in sorted([coluna.id, destino_id]):
                    _travar_ou_rejeitar(Card, escopo_id)

                cards = list(itens_do_escopo(Card, coluna.id).select_for_update())
                movidos = anexar_ao_fim(Card, cards, destino_id)

            coluna.delete()
    except DatabaseError as e:
        logger.error(f"❌ Falha ao excluir coluna {coluna.id}: {e}")
        raise FalhaPersistencia(str(e)) from e

    logger.info(f"🗑️ Coluna {coluna.id} excluída ({len(movidos)} card(s) movidos para {destino_id})")
    return movidos
