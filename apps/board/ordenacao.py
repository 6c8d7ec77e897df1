# apps/board/ordenacao.py

"""
Modelo de ordem dos itens de um escopo

A posição (campo ``ordem``) só tem significado relativo dentro do
escopo pai. Valores não precisam ser contíguos nem começar em zero.
"""

from collections import Counter
from functools import cmp_to_key
from typing import Iterable, List


def comparar(a, b) -> int:
    """Único comparador válido entre dois itens do mesmo escopo"""
    return a.ordem - b.ordem


def ordenar(itens: Iterable) -> List:
    """Itens em ordem ascendente de posição"""
    return sorted(itens, key=cmp_to_key(comparar))


def ids_em_ordem(itens: Iterable) -> List:
    return [item.id for item in ordenar(itens)]


def ordens_duplicadas(itens: Iterable) -> List[int]:
    """
    Posições repetidas dentro de um escopo

    Lista vazia significa que a ordem total está preservada.
    """
    contagem = Counter(item.ordem for item in itens)
    return sorted(ordem for ordem, total in contagem.items() if total > 1)


def itens_do_escopo(modelo, escopo_id):
    """QuerySet dos itens de um escopo na ordem canônica de leitura"""
    return modelo.objects.filter(**modelo.filtro_escopo(escopo_id)).order_by('ordem')


def travar_escopo(modelo, escopo_id):
    """
    Bloqueia a linha do escopo pai até o fim da transação atual

    Serializa escritores concorrentes do mesmo escopo, inclusive quando
    ele ainda não tem itens. Lança DoesNotExist se o escopo não existir.
    """
    return modelo.modelo_escopo().objects.select_for_update().get(pk=escopo_id)
