# apps/board/consumers.py

import asyncio
import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone

from apps.core.models import Board

from .coordenacao import CoordenadorMovimento, ResultadoMovimento
from .estado import estado_board, resumos_do_board
from .notificacoes import grupo_board
from .reconciliacao import (
    AplicarCandidato,
    Cancelar,
    Finalizar,
    Gatilho,
    MotorReconciliacao,
    Origem,
    ResumoItem,
)

logger = logging.getLogger(__name__)


class MensagemInvalida(ValueError):
    pass


def _ler_id(valor, campo):
    if isinstance(valor, bool) or not isinstance(valor, (int, str)):
        raise MensagemInvalida(f"{campo} inválido: {valor!r}")
    return valor


def _ler_candidatos(bruto):
    """
    [{"escopo_id": 1, "itens": [{"id": 10, ...}, ...]}, ...] -> {1: [ResumoItem, ...]}
    """
    if not isinstance(bruto, list):
        raise MensagemInvalida("candidatos deve ser uma lista")

    candidatos = {}
    for entrada in bruto:
        if not isinstance(entrada, dict) or 'escopo_id' not in entrada:
            raise MensagemInvalida("candidato sem escopo_id")
        escopo_id = _ler_id(entrada['escopo_id'], 'escopo_id')
        itens = entrada.get('itens')
        if not isinstance(itens, list):
            raise MensagemInvalida(f"itens inválidos no escopo {escopo_id}")

        resumos = []
        for item in itens:
            if not isinstance(item, dict) or 'id' not in item:
                raise MensagemInvalida(f"item sem id no escopo {escopo_id}")
            resumos.append(ResumoItem(_ler_id(item['id'], 'id do item'), item))
        candidatos[escopo_id] = resumos
    return candidatos


class BoardConsumer(AsyncWebsocketConsumer):
    """
    Consumer WebSocket do board Kanban

    Cada conexão mantém dois motores de reconciliação (colunas e cards).
    O cliente envia os eventos do arraste (considerar/finalizar/cancelar),
    recebe de volta a lista local otimista e, depois do drop, o resultado
    da persistência. Mudanças gravadas são avisadas a todo o grupo.
    """

    async def connect(self):
        self.board_id = self.scope['url_route']['kwargs']['board_id']
        self.board_group_name = grupo_board(self.board_id)
        self.user = self.scope['user']

        if not self.user.is_authenticated:
            logger.warning("❌ Conexão WebSocket rejeitada - usuário não autenticado")
            await self.close()
            return

        escopos = await self.carregar_resumos()
        if escopos is None:
            logger.warning(f"❌ Conexão WebSocket rejeitada - board {self.board_id} não existe")
            await self.close()
            return

        escopos_colunas, escopos_cards = escopos
        self.coordenador = CoordenadorMovimento()
        self.motores = {
            'coluna': MotorReconciliacao('coluna', escopos_colunas, ao_finalizar=self.agendar_persistencia),
            'card': MotorReconciliacao('card', escopos_cards, ao_finalizar=self.agendar_persistencia),
        }
        self.pendentes = set()

        await self.channel_layer.group_add(self.board_group_name, self.channel_name)
        await self.accept()

        logger.info(f"✅ WebSocket conectado - {self.user.username} no board {self.board_id}")

    async def disconnect(self, close_code):
        if hasattr(self, 'motores'):
            await self.channel_layer.group_discard(self.board_group_name, self.channel_name)

        logger.info(f"🔌 WebSocket desconectado - board {self.board_id} (código {close_code})")

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data)
        except (json.JSONDecodeError, TypeError):
            logger.error(f"❌ JSON inválido recebido via WebSocket de {self.user.username}")
            await self.enviar_erro('JSON inválido')
            return

        if not isinstance(data, dict):
            await self.enviar_erro('Mensagem deve ser um objeto')
            return

        message_type = data.get('type')

        try:
            if message_type == 'ping':
                await self.enviar({'type': 'pong'})

            elif message_type == 'sync_board':
                await self.sincronizar_motores()
                estado = await self.get_board_state()
                await self.enviar({'type': 'board_sync', 'board_data': estado})

            elif message_type == 'considerar':
                motor = self.motor_da_mensagem(data)
                motor.despachar(AplicarCandidato(
                    _ler_id(data.get('item_id'), 'item_id'),
                    _ler_candidatos(data.get('candidatos')),
                ))
                await self.enviar_estado_local(motor)

            elif message_type == 'finalizar':
                motor = self.motor_da_mensagem(data)
                try:
                    origem = Origem(data.get('origem', Origem.PONTEIRO.value))
                except ValueError:
                    raise MensagemInvalida(f"origem desconhecida: {data.get('origem')}")

                motor.despachar(Finalizar(
                    _ler_id(data.get('item_id'), 'item_id'),
                    _ler_candidatos(data.get('candidatos', [])),
                    origem=origem,
                    fora_de_zona=bool(data.get('fora_de_zona', False)),
                ))
                await self.enviar_estado_local(motor)

            elif message_type == 'cancelar':
                motor = self.motor_da_mensagem(data)
                motor.despachar(Cancelar())
                await self.enviar_estado_local(motor)

            else:
                await self.enviar_erro(f'Tipo de mensagem desconhecido: {message_type}')

        except ValueError as e:
            logger.warning(f"⚠️ Mensagem rejeitada de {self.user.username}: {e}")
            await self.enviar_erro(str(e))

    # === Persistência em segundo plano ===

    def agendar_persistencia(self, evento):
        """Gancho dos motores: o drop nunca espera o banco"""
        tarefa = asyncio.ensure_future(self.persistir(evento))
        self.pendentes.add(tarefa)
        tarefa.add_done_callback(self.pendentes.discard)

    async def persistir(self, evento):
        try:
            resultado = await database_sync_to_async(self.coordenador.processar)(evento)
        except Exception as e:
            logger.exception(f"❌ Erro inesperado ao persistir {evento.tipo} {evento.item_id}: {e}")
            resultado = ResultadoMovimento(sucesso=False, erro='Erro interno ao gravar o movimento')

        await self.enviar({
            'type': 'movimento_persistido',
            'tipo': evento.tipo,
            'item_id': evento.item_id,
            'gatilho': evento.gatilho.value,
            'origem': evento.origem.value,
            'success': resultado.sucesso,
            'chamadas': list(resultado.chamadas),
            'erro': resultado.erro,
        })

        if resultado.sucesso and evento.gatilho != Gatilho.CANCELADO:
            await self.channel_layer.group_send(
                self.board_group_name,
                {
                    'type': 'board_atualizado',
                    'message': {
                        'motivo': f'{evento.tipo}_movido',
                        'usuario': self.user.get_full_name() or self.user.username,
                        'item_id': evento.item_id,
                        'timestamp': self.get_timestamp(),
                    }
                }
            )

    # === Handlers do grupo ===

    async def board_atualizado(self, event):
        """Estado persistido mudou: atualiza a referência dos motores"""
        await self.sincronizar_motores()
        await self.enviar({'type': 'board_atualizado', 'message': event['message']})

    # === Métodos auxiliares ===

    def motor_da_mensagem(self, data):
        tipo = data.get('tipo', 'card')
        if tipo not in self.motores:
            raise MensagemInvalida(f"tipo desconhecido: {tipo}")
        return self.motores[tipo]

    async def sincronizar_motores(self):
        escopos = await self.carregar_resumos()
        if escopos is None:
            return
        escopos_colunas, escopos_cards = escopos
        self.motores['coluna'].sincronizar(escopos_colunas)
        self.motores['card'].sincronizar(escopos_cards)

    async def enviar_estado_local(self, motor):
        await self.enviar({
            'type': 'estado_local',
            'tipo': motor.tipo,
            'em_arraste': motor.em_arraste,
            'listas': [
                {'escopo_id': escopo, 'ids': [item.id for item in itens]}
                for escopo, itens in motor.estado.local.items()
            ],
        })

    async def enviar_erro(self, mensagem):
        await self.enviar({'type': 'erro', 'error': mensagem})

    async def enviar(self, payload):
        payload.setdefault('timestamp', self.get_timestamp())
        await self.send(text_data=json.dumps(payload))

    @database_sync_to_async
    def carregar_resumos(self):
        try:
            board = Board.objects.get(id=self.board_id)
        except Board.DoesNotExist:
            return None
        return resumos_do_board(board)

    @database_sync_to_async
    def get_board_state(self):
        """
        Retorna estado atual do board para sincronização
        """
        try:
            board = Board.objects.get(id=self.board_id)
        except Board.DoesNotExist:
            return {}
        return estado_board(board)

    def get_timestamp(self):
        return timezone.now().isoformat()
