# apps/board/coordenacao.py

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple

from apps.core.models import Card, Coluna

from . import persistencia
from .erros import ErroOrdenacao
from .reconciliacao import EventoFinalizacao, Gatilho

logger = logging.getLogger(__name__)

MODELOS = {
    'card': Card,
    'coluna': Coluna,
}


class GatewayOrdenacao(Protocol):
    """Operações de escrita que o coordenador precisa"""

    def reordenar(self, tipo: str, escopo_id, ids: Sequence) -> None:
        ...

    def mover(self, tipo: str, item_id, destino_id, ids_destino: Sequence, ids_origem: Sequence) -> None:
        ...


class GatewayBanco:
    """Gateway direto para o banco via serviços de persistência"""

    def reordenar(self, tipo, escopo_id, ids):
        persistencia.reordenar_escopo(MODELOS[tipo], escopo_id, list(ids))

    def mover(self, tipo, item_id, destino_id, ids_destino, ids_origem):
        persistencia.mover_entre_escopos(
            MODELOS[tipo], item_id, destino_id, list(ids_destino), list(ids_origem)
        )


@dataclass(frozen=True)
class ResultadoMovimento:
    sucesso: bool
    chamadas: Tuple[str, ...] = ()
    erro: Optional[str] = None


class CoordenadorMovimento:
    """
    Recebe eventos de finalização e emite as escritas necessárias

    - mesmo escopo: uma reordenação
    - escopo diferente: reatribuição + reordenação de destino e origem,
      tudo em uma única operação atômica do gateway
    - gesto cancelado: nenhuma escrita

    Falhas não são repetidas e não desfazem o estado otimista do
    cliente; a divergência dura até a próxima sincronização.
    """

    def __init__(self, gateway: Optional[GatewayOrdenacao] = None):
        self.gateway = gateway or GatewayBanco()

    def processar(self, evento: EventoFinalizacao) -> ResultadoMovimento:
        if evento.gatilho == Gatilho.CANCELADO:
            return ResultadoMovimento(sucesso=True)

        try:
            if evento.cruzou_escopo:
                self.gateway.mover(
                    evento.tipo,
                    evento.item_id,
                    evento.escopo_destino,
                    evento.listas[evento.escopo_destino],
                    evento.listas[evento.escopo_origem],
                )
                chamadas = ('mover',)
            else:
                self.gateway.reordenar(
                    evento.tipo,
                    evento.escopo_destino,
                    evento.listas[evento.escopo_destino],
                )
                chamadas = ('reordenar',)
        except ErroOrdenacao as e:
            logger.warning(
                f"⚠️ Movimento de {evento.tipo} {evento.item_id} não aplicado "
                f"({evento.escopo_origem} -> {evento.escopo_destino}): {e}"
            )
            return ResultadoMovimento(sucesso=False, erro=str(e))

        logger.info(
            f"✅ {evento.tipo} {evento.item_id} finalizado via {evento.origem.value} "
            f"({evento.escopo_origem} -> {evento.escopo_destino})"
        )
        return ResultadoMovimento(sucesso=True, chamadas=chamadas)
