# apps/board/wip.py

from dataclasses import dataclass
from typing import Dict, List, Optional

from django.conf import settings
from django.db.models import Count


@dataclass(frozen=True)
class EstadoWip:
    """Estado indicativo do limite WIP de uma coluna"""

    no_limite: bool
    acima_limite: bool


def avaliar_wip(total: int, limite_wip: Optional[int]) -> EstadoWip:
    """
    Avalia o limite WIP de uma coluna

    Apenas exibição: nunca impede criação ou movimentação de cards.
    """
    if limite_wip is None:
        return EstadoWip(no_limite=False, acima_limite=False)
    return EstadoWip(no_limite=total == limite_wip, acima_limite=total > limite_wip)


def verificar_gargalos_wip(board) -> List[Dict]:
    """
    Identifica colunas que estão no limite WIP ou próximas
    """
    limiar = getattr(settings, 'RAIA_LIMIAR_GARGALO_WIP', 80)
    gargalos = []

    colunas = (
        board.colunas.filter(limite_wip__isnull=False, limite_wip__gt=0)
        .annotate(total_cards=Count('cards'))
        .order_by('ordem')
    )
    for coluna in colunas:
        estado = avaliar_wip(coluna.total_cards, coluna.limite_wip)
        percentual_uso = (coluna.total_cards / coluna.limite_wip) * 100

        if percentual_uso >= limiar:
            gargalos.append({
                'coluna_id': coluna.id,
                'titulo': coluna.titulo,
                'cards': coluna.total_cards,
                'limite': coluna.limite_wip,
                'percentual': round(percentual_uso, 1),
                'status': 'crítico' if estado.acima_limite or estado.no_limite else 'alerta'
            })

    return gargalos
