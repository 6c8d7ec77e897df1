# apps/board/posicionamento.py

import logging

from django.db import transaction

from .ordenacao import itens_do_escopo, travar_escopo

logger = logging.getLogger(__name__)


def inserir_no_topo(modelo, escopo_id, **campos):
    """
    Cria um item na posição 0 do escopo (política dos cards)

    Todos os irmãos descem uma posição na mesma transação, então a
    ordem relativa anterior é mantida e o novo item é o menor.
    """
    with transaction.atomic():
        travar_escopo(modelo, escopo_id)

        irmaos = list(itens_do_escopo(modelo, escopo_id).select_for_update())
        for irmao in irmaos:
            irmao.ordem += 1
        if irmaos:
            modelo.objects.bulk_update(irmaos, ['ordem'])

        item = modelo.objects.create(ordem=0, **modelo.filtro_escopo(escopo_id), **campos)

    logger.debug(f"{modelo.__name__} {item.id} inserido no topo do escopo {escopo_id}")
    return item


def proxima_ordem_no_fim(modelo, escopo_id):
    """Maior ordem do escopo + 1 (escopo vazio conta como -1)"""
    ordens = list(itens_do_escopo(modelo, escopo_id).values_list('ordem', flat=True))
    return max(ordens, default=-1) + 1


def inserir_no_fim(modelo, escopo_id, **campos):
    """
    Cria um item depois do último do escopo (política das colunas)

    Os irmãos não são alterados; lacunas existentes são mantidas.
    """
    with transaction.atomic():
        travar_escopo(modelo, escopo_id)
        ordem = proxima_ordem_no_fim(modelo, escopo_id)
        item = modelo.objects.create(ordem=ordem, **modelo.filtro_escopo(escopo_id), **campos)

    logger.debug(f"{modelo.__name__} {item.id} inserido no fim do escopo {escopo_id} (ordem {ordem})")
    return item


def anexar_ao_fim(modelo, itens, escopo_id):
    """
    Move itens já existentes para o fim de outro escopo

    A ordem relativa entre eles é preservada. Deve ser chamada dentro
    de uma transação que já trave os escopos envolvidos.
    """
    ordem = proxima_ordem_no_fim(modelo, escopo_id)
    movidos = []
    for item in itens:
        setattr(item, f'{modelo.CAMPO_ESCOPO}_id', escopo_id)
        item.ordem = ordem
        ordem += 1
        movidos.append(item)

    if movidos:
        modelo.objects.bulk_update(movidos, [f'{modelo.CAMPO_ESCOPO}_id', 'ordem'])
    return movidos
