# apps/board/reconciliacao.py

"""
Reconciliação de arraste (drag-and-drop)

Mantém, por escopo visível, uma cópia local e otimista da lista
ordenada enquanto um gesto de arraste está em andamento. Nada aqui
toca o banco ou a rede: o estado é um valor imutável e cada comando
(AplicarCandidato, Finalizar, Cancelar) produz um novo estado via
``reduzir``. A persistência fica a cargo de quem recebe o
EventoFinalizacao (ver coordenacao.py).
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple


class Gatilho(str, Enum):
    """Classificação de como o gesto terminou"""

    NOVA_ZONA = 'nova_zona'
    ZONA_ORIGINAL = 'zona_original'
    CANCELADO = 'cancelado'


class Origem(str, Enum):
    """Dispositivo que conduziu o gesto"""

    PONTEIRO = 'ponteiro'
    TECLADO = 'teclado'


@dataclass(frozen=True)
class ResumoItem:
    """Id do item + metadados suficientes para renderizar"""

    id: Any
    dados: Mapping = field(default_factory=dict, compare=False, hash=False)


Listas = Dict[Any, Tuple[ResumoItem, ...]]


# === Comandos ===

@dataclass(frozen=True)
class AplicarCandidato:
    """Ordem candidata durante o arraste (consider); sem persistência"""

    item_id: Any
    candidatos: Mapping[Any, Sequence[ResumoItem]]


@dataclass(frozen=True)
class Finalizar:
    """Fim do gesto (drop). fora_de_zona=True equivale a soltar fora de qualquer alvo"""

    item_id: Any
    candidatos: Mapping[Any, Sequence[ResumoItem]]
    origem: Origem = Origem.PONTEIRO
    fora_de_zona: bool = False


@dataclass(frozen=True)
class Cancelar:
    """Escape ou ponteiro solto fora de alvo válido"""


# === Estado ===

@dataclass(frozen=True)
class Gesto:
    item_id: Any
    escopo_origem: Any


@dataclass(frozen=True)
class EstadoReconciliacao:
    persistido: Listas
    local: Listas
    gesto: Optional[Gesto] = None

    @classmethod
    def inicial(cls, escopos: Mapping[Any, Sequence[ResumoItem]]):
        listas = {escopo: tuple(itens) for escopo, itens in escopos.items()}
        return cls(persistido=listas, local=dict(listas))


@dataclass(frozen=True)
class EventoFinalizacao:
    """Resultado de um gesto finalizado, entregue ao coordenador"""

    tipo: str
    item_id: Any
    escopo_origem: Any
    escopo_destino: Any
    gatilho: Gatilho
    origem: Origem
    listas: Mapping[Any, Tuple[Any, ...]]

    @property
    def cruzou_escopo(self):
        return self.gatilho == Gatilho.NOVA_ZONA


def escopo_do_item(listas: Mapping[Any, Sequence[ResumoItem]], item_id) -> Optional[Any]:
    for escopo, itens in listas.items():
        if any(item.id == item_id for item in itens):
            return escopo
    return None


def _contem(itens, item_id):
    return any(item.id == item_id for item in itens)


def combinar_candidatos(local: Listas, candidatos, item_id) -> Tuple[Listas, Optional[Any]]:
    """
    Aplica as listas candidatas sobre o estado local em uma única transição

    Se o item aparece em mais de um escopo, a lista do destino (onde o
    item ainda não estava) manda; o item é removido de todos os outros
    escopos no mesmo passo, sem estado intermediário duplicado ou vazio.
    """
    novo = dict(local)
    for escopo, itens in candidatos.items():
        novo[escopo] = tuple(itens)

    com_item = [escopo for escopo, itens in candidatos.items() if _contem(itens, item_id)]
    recem_chegados = [escopo for escopo in com_item if not _contem(local.get(escopo, ()), item_id)]

    if recem_chegados:
        destino = recem_chegados[-1]
    elif com_item:
        destino = com_item[-1]
    else:
        destino = escopo_do_item(novo, item_id)

    if destino is not None:
        for escopo, itens in novo.items():
            if escopo != destino and _contem(itens, item_id):
                novo[escopo] = tuple(item for item in itens if item.id != item_id)

    return novo, destino


def _ids(itens):
    return tuple(item.id for item in itens)


def reduzir(estado: EstadoReconciliacao, comando, tipo: str = 'card'):
    """
    Transição pura: (estado, comando) -> (novo estado, evento ou None)
    """
    if isinstance(comando, Cancelar):
        return replace(estado, local=dict(estado.persistido), gesto=None), None

    if not isinstance(comando, (AplicarCandidato, Finalizar)):
        raise TypeError(f"Comando desconhecido: {comando!r}")

    gesto = estado.gesto
    if gesto is not None and gesto.item_id != comando.item_id:
        raise ValueError(f"Gesto em andamento para o item {gesto.item_id}, recebido {comando.item_id}")
    if gesto is None:
        gesto = Gesto(comando.item_id, escopo_do_item(estado.local, comando.item_id))

    if isinstance(comando, AplicarCandidato):
        local, _ = combinar_candidatos(estado.local, comando.candidatos, comando.item_id)
        return replace(estado, local=local, gesto=gesto), None

    if comando.fora_de_zona:
        evento = EventoFinalizacao(
            tipo=tipo,
            item_id=comando.item_id,
            escopo_origem=gesto.escopo_origem,
            escopo_destino=gesto.escopo_origem,
            gatilho=Gatilho.CANCELADO,
            origem=comando.origem,
            listas={},
        )
        return replace(estado, local=dict(estado.persistido), gesto=None), evento

    local, destino = combinar_candidatos(estado.local, comando.candidatos, comando.item_id)
    if destino is None:
        raise ValueError(f"Item {comando.item_id} não está em nenhum escopo")

    escopo_origem = gesto.escopo_origem if gesto.escopo_origem is not None else destino
    if destino != escopo_origem:
        gatilho = Gatilho.NOVA_ZONA
        listas = {destino: _ids(local[destino]), escopo_origem: _ids(local.get(escopo_origem, ()))}
    else:
        gatilho = Gatilho.ZONA_ORIGINAL
        listas = {destino: _ids(local[destino])}

    evento = EventoFinalizacao(
        tipo=tipo,
        item_id=comando.item_id,
        escopo_origem=escopo_origem,
        escopo_destino=destino,
        gatilho=gatilho,
        origem=comando.origem,
        listas=listas,
    )
    # O persistido só muda quando o servidor confirma (sincronizar)
    return EstadoReconciliacao(persistido=estado.persistido, local=local), evento


def sincronizar(estado: EstadoReconciliacao, escopos: Mapping[Any, Sequence[ResumoItem]]):
    """
    Estado persistido novo chegou (recarga do board)

    Sobrescreve a referência; a lista local só é trocada fora de um
    gesto, para não interromper um arraste em andamento.
    """
    persistido = dict(estado.persistido)
    persistido.update({escopo: tuple(itens) for escopo, itens in escopos.items()})

    if estado.gesto is not None:
        return replace(estado, persistido=persistido)
    return EstadoReconciliacao(persistido=persistido, local=dict(persistido))


class MotorReconciliacao:
    """
    Máquina de estados de arraste para um tipo de item ('card' ou 'coluna')

    ``ao_finalizar`` recebe o EventoFinalizacao; quem o fornece decide
    como agendar a persistência sem bloquear a interface.
    """

    def __init__(self, tipo: str, escopos=None, ao_finalizar: Optional[Callable] = None):
        self.tipo = tipo
        self.estado = EstadoReconciliacao.inicial(escopos or {})
        self._ao_finalizar = ao_finalizar

    @property
    def em_arraste(self):
        return self.estado.gesto is not None

    def lista_local(self, escopo):
        return self.estado.local.get(escopo, ())

    def ids_locais(self, escopo):
        return [item.id for item in self.lista_local(escopo)]

    def despachar(self, comando):
        self.estado, evento = reduzir(self.estado, comando, self.tipo)
        if evento is not None and self._ao_finalizar is not None:
            self._ao_finalizar(evento)
        return evento

    def sincronizar(self, escopos):
        self.estado = sincronizar(self.estado, escopos)
